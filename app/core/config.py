from pydantic_settings import BaseSettings, SettingsConfigDict

class Settings(BaseSettings):
    # App Basics
    app_env: str = "dev"
    app_name: str = "Premium & Engagement Core"
    app_host: str = "0.0.0.0"
    app_port: int = 8000
    log_level: str = "info"
    # "json" in production, "text" for local development
    log_format: str = "json"

    # Database
    database_url: str = "sqlite:///./dev.db"
    db_echo: bool = False

    # JWT (tokens are issued elsewhere, we only verify them)
    jwt_secret: str = "secret_key"
    jwt_alg: str = "HS256"
    jwt_access_ttl_min: int = 60

    # RevenueCat
    # Sent verbatim in the Authorization header of every webhook delivery.
    # Empty means every delivery is rejected.
    revenuecat_webhook_secret: str = ""

    # Tell pydantic to read from .env file
    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="",
        extra="ignore",
    )

settings = Settings()
