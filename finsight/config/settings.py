"""
Configuration Management for Finsight

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
This makes it easy to see what external dependencies exist and
ensures all required configuration is validated at startup.
"""

from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class FirebaseSettings(BaseSettings):
    """Firestore storage and Firebase Auth configuration."""

    model_config = SettingsConfigDict(
        env_prefix="FIREBASE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    project_id: str = Field(
        ...,
        description="Google Cloud project hosting the Firestore database"
    )
    credentials_path: str = Field(
        ...,
        description="Path to the service account credentials JSON"
    )
    web_api_key: str = Field(
        ...,
        description="Firebase web API key used by the Auth REST endpoints"
    )
    database: str = Field(
        default="(default)",
        description="Firestore database id"
    )
    auth_timeout_seconds: float = Field(
        default=10.0,
        gt=0,
        le=60,
        description="Timeout for Firebase Auth HTTP calls"
    )

    @field_validator('credentials_path')
    @classmethod
    def validate_credentials_path(cls, v: str) -> str:
        """Warn if credentials file doesn't exist (but don't fail - might be mounted later)."""
        if not Path(v).exists():
            import warnings
            warnings.warn(
                f"Firebase credentials file not found at {v}. "
                "Make sure it exists before running the application."
            )
        return v


class GeminiSettings(BaseSettings):
    """Gemini LLM configuration."""

    model_config = SettingsConfigDict(
        env_prefix="GEMINI_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    api_key: str = Field(
        ...,
        description="Gemini API key"
    )
    model_name: str = Field(
        default="gemini-2.5-flash",
        description="Gemini model to use"
    )
    max_tokens: int = Field(
        default=2048,
        ge=100,
        le=8192,
        description="Maximum tokens in response"
    )
    temperature: float = Field(
        default=0.4,
        ge=0.0,
        le=1.0,
        description="Model temperature (lower = more deterministic)"
    )


class AppSettings(BaseSettings):
    """
    Main application settings.

    Loads configuration from environment variables and .env file.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # Logging
    log_level: str = Field(
        default="INFO",
        description="Minimum level for structured logs"
    )

    # Display
    currency_code: str = Field(
        default="INR",
        min_length=3,
        max_length=3,
        description="ISO currency code used when formatting amounts"
    )
    currency_symbol: str = Field(
        default="₹",
        description="Symbol prefixed to formatted amounts"
    )
    recent_transactions_limit: int = Field(
        default=5,
        ge=1,
        le=50,
        description="How many transactions the dashboard lists"
    )

    # Validation thresholds
    max_transaction_amount: float = Field(
        default=10000000.0,
        description="Amount above which a transaction is flagged as unusual"
    )
    future_date_tolerance_days: int = Field(
        default=7,
        ge=0,
        description="How many days in the future a transaction date can be"
    )

    @property
    def log_level_number(self) -> int:
        """Get the log level as a logging module constant."""
        import logging
        level = logging.getLevelName(self.log_level.upper())
        return level if isinstance(level, int) else logging.INFO


class Settings(BaseSettings):
    """
    Root settings container.

    Aggregates all sub-settings for easy access.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # Sub-settings are loaded lazily to allow partial configuration

    @property
    def firebase(self) -> FirebaseSettings:
        return FirebaseSettings()

    @property
    def gemini(self) -> GeminiSettings:
        return GeminiSettings()

    @property
    def app(self) -> AppSettings:
        return AppSettings()


@lru_cache()
def get_settings() -> Settings:
    """
    Get application settings (cached).

    Uses LRU cache to ensure settings are only loaded once.
    Call get_settings.cache_clear() to reload if needed.
    """
    return Settings()


def validate_all_settings() -> dict[str, bool]:
    """
    Validate all settings are properly configured.

    Returns a dict of {setting_name: is_valid}.
    Useful for startup checks.
    """
    results = {}

    settings = get_settings()

    try:
        _ = settings.firebase
        results["firebase"] = True
    except Exception as e:
        results["firebase"] = False
        results["firebase_error"] = str(e)

    try:
        _ = settings.gemini
        results["gemini"] = True
    except Exception as e:
        results["gemini"] = False
        results["gemini_error"] = str(e)

    try:
        _ = settings.app
        results["app"] = True
    except Exception as e:
        results["app"] = False
        results["app_error"] = str(e)

    return results
