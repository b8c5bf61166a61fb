"""Application settings, configurable through environment variables or a .env file."""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime configuration for the assignment review portal."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # Application
    APP_NAME: str = "Assignment Review Portal"
    DATABASE_URL: str = "sqlite:///./review_portal.db"
    DATABASE_ECHO: bool = False

    # Identity tokens
    JWT_SECRET_KEY: str = "CHANGE_ME_TO_A_RANDOM_SECRET"
    JWT_ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_DAYS: int = 7

    # Account lifecycle
    OTP_EXPIRE_MINUTES: int = 10
    BCRYPT_ROUNDS: int = 12
    DEFAULT_ADMIN_EMAIL: str = "admin@example.com"
    DEFAULT_ADMIN_PASSWORD: str = "admin123"

    # Outbound email
    EMAIL_ENABLED: bool = True
    SMTP_SERVER: str = "smtp.gmail.com"
    SMTP_PORT: int = 587
    SMTP_USERNAME: str = ""
    SMTP_PASSWORD: str = ""
    EMAIL_FROM: str = "no-reply@example.com"

    # Uploads
    MAX_UPLOAD_BYTES: int = 20 * 1024 * 1024

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "text"  # "text" or "json"


settings = Settings()
