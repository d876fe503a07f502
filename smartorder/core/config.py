"""Application configuration."""
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # OpenAI
    openai_api_key: str
    openai_model: str = "gpt-4o-mini"

    # Stripe
    stripe_secret_key: str = ""
    payment_currency: str = "hkd"

    # Database
    database_url: str
    seed_catalog: bool = True

    # Admin
    dashboard_password: str

    # Product images
    media_dir: str = "media"
    media_url: str = "/media"
    max_image_bytes: int = 4 * 1024 * 1024

    # Restaurant
    restaurant_name: str = "SmartOrder"

    # Logging
    log_level: str = "INFO"

    # Server
    host: str = "0.0.0.0"
    port: int = 8000

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )


settings = Settings()
