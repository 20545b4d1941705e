"""
Service Configuration for md-to-docs.

Reads every runtime setting from environment variables in one place.
"""

import os

ENV_PRODUCTION = "production"
ENV_DEVELOPMENT = "development"


class ServiceConfig:
    """
    Centralized service configuration.

    Values are read once from the environment when the object is created;
    use `reset_config()` to pick up changes (tests do this).
    """

    def __init__(self):
        # HTTP server
        self.host = os.getenv("MD_TO_DOCS_HOST", "0.0.0.0")
        self.port = int(os.getenv("PORT", os.getenv("MD_TO_DOCS_PORT", "3000")))

        # Deployment environment; production hides the debug DOCX route
        self.environment = os.getenv("MD_TO_DOCS_ENV", ENV_DEVELOPMENT).lower()

        # Logging
        self.log_level = os.getenv("LOG_LEVEL", "INFO").upper()

        # Caller-side timeout around one conversion, in seconds
        self.conversion_timeout = float(os.getenv("CONVERSION_TIMEOUT_SECONDS", "30"))
        if self.conversion_timeout <= 0:
            raise ValueError("CONVERSION_TIMEOUT_SECONDS must be positive")

        # Filename used when a DOCX request has none
        self.default_document_title = os.getenv("DEFAULT_DOCUMENT_TITLE", "Converted from Markdown")

    @property
    def is_production(self) -> bool:
        return self.environment == ENV_PRODUCTION

    def get_config_summary(self) -> str:
        """Get a summary of the current configuration for logging."""
        return (
            f"host={self.host} port={self.port} environment={self.environment} "
            f"log_level={self.log_level} conversion_timeout={self.conversion_timeout}s"
        )


_config: ServiceConfig | None = None


def get_config() -> ServiceConfig:
    """Get the process-wide configuration, creating it on first use."""
    global _config
    if _config is None:
        _config = ServiceConfig()
    return _config


def reset_config() -> None:
    """Drop the cached configuration so the next `get_config()` re-reads the environment."""
    global _config
    _config = None
