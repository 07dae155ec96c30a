"""
Configuration settings for the File Search store client.
Loads Gemini credentials, polling policy and logging options from the environment or a .env file.
"""

from typing import Optional, Dict, Any
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
import structlog

logger = structlog.get_logger(__name__).bind(log_type="SYSTEM")


class Settings(BaseSettings):
    """
    Application settings.

    Environment variables are matched case-insensitively against field names,
    e.g. GEMINI_API_KEY populates ``gemini_api_key``.
    """

    # Gemini API Configuration
    gemini_api_key: Optional[str] = Field(
        None,
        description="Gemini API key used to build the backend client"
    )
    gemini_model: str = Field(
        "gemini-2.5-flash",
        description="Model used for grounded generation"
    )

    # Operation Polling Configuration
    poll_interval_seconds: float = Field(
        3.0,
        ge=0.0,
        le=300.0,
        description="Seconds to wait between operation status checks"
    )
    poll_max_attempts: Optional[int] = Field(
        None,
        ge=1,
        description="Maximum operation status checks before giving up (unset means unbounded)"
    )
    poll_backoff_enabled: bool = Field(
        False,
        description="Grow the polling interval exponentially instead of keeping it fixed"
    )
    poll_max_interval_seconds: float = Field(
        30.0,
        ge=0.0,
        le=600.0,
        description="Upper bound for the polling interval when backoff is enabled"
    )

    # Query Configuration
    default_language: str = Field(
        "en",
        description="Language code used when callers do not supply one"
    )

    # Logging Configuration
    log_level: str = Field(
        "INFO",
        description="Logging level"
    )
    log_format: str = Field(
        "json",
        description="Log format (json, text)"
    )
    log_file_path: str = Field(
        "logs/ragstore.log",
        description="Log file path"
    )
    enable_console_logging: bool = Field(
        True,
        description="Enable console logging output"
    )
    enable_file_logging: bool = Field(
        False,
        description="Enable file logging"
    )
    enable_json_logging: bool = Field(
        True,
        description="Use structured JSON logging"
    )

    # Environment Configuration
    environment: str = Field(
        "dev",
        description="Deployment environment (dev, staging, prod)"
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        validate_assignment=True,
        extra="ignore"
    )

    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v):
        """Validate log level."""
        valid_levels = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']
        if v.upper() not in valid_levels:
            raise ValueError(f'Log level must be one of: {valid_levels}')
        return v.upper()

    @field_validator('log_format')
    @classmethod
    def validate_log_format(cls, v):
        """Validate log format."""
        valid_formats = ['json', 'text']
        if v.lower() not in valid_formats:
            raise ValueError(f'Log format must be one of: {valid_formats}')
        return v.lower()

    @field_validator('environment')
    @classmethod
    def validate_environment(cls, v):
        """Validate environment."""
        valid_envs = ['dev', 'staging', 'prod']
        if v not in valid_envs:
            raise ValueError(f'Environment must be one of: {valid_envs}')
        return v

    @field_validator('default_language')
    @classmethod
    def validate_default_language(cls, v):
        """Normalize the default language code."""
        if not v or not v.strip():
            raise ValueError('Default language must not be empty')
        return v.strip()

    def has_gemini_config(self) -> bool:
        """Check if the Gemini API configuration is complete."""
        return bool(self.gemini_api_key)

    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment == 'prod'

    def is_development(self) -> bool:
        """Check if running in development environment."""
        return self.environment == 'dev'

    def get_polling_config(self) -> Dict[str, Any]:
        """
        Get operation polling configuration.

        Returns:
            Dictionary containing the polling policy
        """
        return {
            'interval_seconds': self.poll_interval_seconds,
            'max_attempts': self.poll_max_attempts,
            'backoff_enabled': self.poll_backoff_enabled,
            'max_interval_seconds': self.poll_max_interval_seconds,
        }

    def get_log_config(self) -> Dict[str, Any]:
        """
        Get logging configuration.

        Returns:
            Dictionary containing logging configuration
        """
        return {
            'level': self.log_level,
            'format': self.log_format,
            'file_path': self.log_file_path,
            'console': self.enable_console_logging,
            'file': self.enable_file_logging,
            'json': self.enable_json_logging,
        }

    def validate_configuration(self) -> Dict[str, bool]:
        """
        Validate the current configuration.

        Returns:
            Dictionary with validation results
        """
        results = {
            'gemini_configured': self.has_gemini_config(),
            'logging_configured': bool(self.log_file_path) or not self.enable_file_logging,
            'polling_bounded': self.poll_max_attempts is not None,
        }
        results['configuration_complete'] = all([
            results['gemini_configured'],
            results['logging_configured'],
        ])
        return results

    def __repr__(self) -> str:
        """Secure string representation that doesn't expose secrets."""
        return (
            f"Settings("
            f"environment={self.environment}, "
            f"gemini_configured={self.has_gemini_config()}, "
            f"model={self.gemini_model}, "
            f"log_level={self.log_level}"
            f")"
        )


# Global settings instance
_settings: Optional[Settings] = None


def clear_settings_cache():
    """Clear the global settings cache to force reload."""
    global _settings
    _settings = None


def get_settings(reload: bool = False) -> Settings:
    """
    Get application settings instance (singleton pattern).

    Args:
        reload: Whether to reload settings from the environment

    Returns:
        Settings instance
    """
    global _settings

    if _settings is None or reload:
        _settings = Settings()
        logger.info(
            "Settings loaded",
            environment=_settings.environment,
            gemini_configured=_settings.has_gemini_config(),
            model=_settings.gemini_model
        )

    return _settings
