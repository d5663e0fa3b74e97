"""kerf configuration using pydantic-settings.

All configuration is strongly typed and supports environment variables
and .env files.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables or .env file."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
    )

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "console"  # "console" or "json"

    # Validation
    VALIDATION_TOLERANCE: float = 1e-9  # Geometric epsilon for batch checks
    STABILITY_FACTOR: float = 10.0  # Multiple of tolerance flagged as fragile

    # Transform precision
    DRIFT_TOLERANCE: float = 0.001  # 1 micron, for cumulative-drift checks

    # Ellipse perimeter integration
    ELLIPSE_LENGTH_SEGMENTS: int = 256  # Simpson segments (even)


# Singleton instance for import convenience
settings = Settings()
