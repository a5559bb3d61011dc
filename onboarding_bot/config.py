"""Bot configuration from environment variables."""

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    TELEGRAM_BOT_TOKEN: str = ""
    API_BASE_URL: str = "http://api:8000"
    API_TIMEOUT: float = 15.0
    LOG_LEVEL: str = "INFO"

    class Config:
        env_file = ".env"
        extra = "allow"


settings = Settings()
