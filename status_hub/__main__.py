"""
Development entry point: ``python -m status_hub`` or ``status-hub``.
"""

import uvicorn

from shared.config.settings import get_settings


def main() -> None:
    settings = get_settings()
    uvicorn.run(
        "status_hub.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug and settings.environment == "development",
    )


if __name__ == "__main__":
    main()
