"""
Configuration module for the restaurant booking dialogue service.

Loads environment variables and provides configuration settings including
the weather API key, database URL and default weather location.
"""
from typing import Optional
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Attributes:
        database_url: SQLAlchemy connection string for finalized bookings
        openweather_api_key: Optional OpenWeather API key
        weather_base_url: Base URL of the OpenWeather REST API
        default_city: City used when no location is given
        restaurant_name: Restaurant name used in replies
    """

    # Database configuration
    database_url: str = Field(
        default="sqlite:///bookings.db",
        alias="DATABASE_URL",
        description="SQLAlchemy connection string"
    )

    # Weather service
    openweather_api_key: Optional[str] = Field(
        default=None,
        alias="OPENWEATHER_API_KEY",
        description="OpenWeather API key"
    )

    weather_base_url: str = Field(
        default="https://api.openweathermap.org/data/2.5",
        alias="WEATHER_BASE_URL",
        description="OpenWeather API base URL"
    )

    weather_timeout: float = Field(
        default=5.0,
        alias="WEATHER_TIMEOUT",
        description="Timeout in seconds for weather requests"
    )

    default_city: str = Field(default="Mumbai", alias="DEFAULT_CITY")
    default_lat: float = Field(default=19.0760, alias="DEFAULT_LAT")
    default_lon: float = Field(default=72.8777, alias="DEFAULT_LON")

    # Restaurant Configuration
    restaurant_name: str = Field(
        default="our restaurant",
        alias="RESTAURANT_NAME",
        description="Restaurant name used in greetings"
    )

    default_booking_time: str = Field(
        default="19:00",
        alias="DEFAULT_BOOKING_TIME",
        description="Booking time used when the guest never gave one"
    )

    # Runtime
    environment: str = Field(
        default="development",
        alias="ENVIRONMENT",
        description="development, production or test"
    )

    log_level: Optional[str] = Field(
        default=None,
        alias="LOG_LEVEL",
        description="Overrides the environment's default log level"
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )


# Global settings instance
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """
    Get or create the global settings instance.

    Returns:
        Settings instance with loaded configuration
    """
    global _settings

    if _settings is None:
        _settings = Settings()

    return _settings


def reset_settings() -> None:
    """Drop the cached settings so the next call re-reads the environment."""
    global _settings
    _settings = None


def get_weather_api_key() -> str:
    """
    Get the OpenWeather API key.

    Returns:
        API key string

    Raises:
        ValueError: If the API key is not configured
    """
    settings = get_settings()

    if not settings.openweather_api_key:
        raise ValueError(
            "OpenWeather API key not configured. "
            "Please set OPENWEATHER_API_KEY environment variable."
        )
    return settings.openweather_api_key
