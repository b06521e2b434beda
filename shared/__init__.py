"""
Shared module for common utilities across the REST API and the status hub.

STRUCTURE:
- shared.config: Configuration
  - settings.py: Environment config (Pydantic)
  - logging.py: Structured logging

- shared.infrastructure: Cross-cutting plumbing
  - correlation.py: Request/connection correlation IDs for logs

- shared.utils: Utilities
  - exceptions.py: HTTP exceptions with auto-logging and error envelope

IMPORT EXAMPLES:
    from shared.config.settings import settings, get_settings
    from shared.config.logging import get_logger
    from shared.utils.exceptions import NotFoundError, ValidationError
"""
