"""
Application settings loaded from environment variables.
Uses pydantic-settings for type-safe configuration.
"""

from functools import lru_cache

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings with defaults for development."""

    # Server
    host: str = "0.0.0.0"
    port: int = 8080
    app_version: str = "2.0.0"

    # CORS: comma-separated list of allowed origins (empty allows any origin)
    allowed_origins: str = ""

    # Environment
    environment: str = "development"
    debug: bool = True

    # Status hub
    broadcast_interval: float = 30.0  # Seconds between metrics_update pushes
    probe_timeout: float = 5.0  # Upper bound for a single startup probe
    shutdown_probe_grace: float = 1.0  # Wait for straggling probes on shutdown

    # WebSocket
    ws_send_timeout: float = 5.0  # A send slower than this counts as failed
    ws_accept_timeout: float = 5.0
    ws_max_message_size: int = 64 * 1024  # 64 KB
    ws_broadcast_batch_size: int = 50  # Concurrent sends per broadcast batch

    # Monitored collaborators
    platform_entry_path: str = "FinishThisIdea-Complete/public/platform-hub.html"
    template_manifest_path: str = "mcp/package.json"

    # Mock document endpoints
    document_generate_delay: float = 1.0  # Simulated processing time in seconds

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False

    @property
    def origins(self) -> list[str]:
        """Allowed CORS origins; ``["*"]`` when none are configured."""
        parsed = [o.strip() for o in self.allowed_origins.split(",") if o.strip()]
        return parsed or ["*"]

    def validate_production_settings(self) -> list[str]:
        """
        Validate that settings are sane for the current environment.
        Returns a list of validation errors. Empty list means all checks pass.
        """
        errors = []

        if self.broadcast_interval <= 0:
            errors.append("BROADCAST_INTERVAL must be greater than zero")

        if self.probe_timeout <= 0:
            errors.append("PROBE_TIMEOUT must be greater than zero")

        if self.ws_send_timeout <= 0:
            errors.append("WS_SEND_TIMEOUT must be greater than zero")

        if self.environment == "production":
            if self.debug:
                errors.append("DEBUG must be False in production")

            if not self.allowed_origins:
                errors.append(
                    "ALLOWED_ORIGINS must be set in production (comma-separated list of allowed domains)"
                )

        return errors


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


# Convenience export
settings = get_settings()
