import os
from functools import lru_cache

from pydantic import BaseModel


class Settings(BaseModel):
    database_url: str = os.getenv(
        "DATABASE_URL",
        "postgresql+asyncpg://onboarding:onboarding@db:5432/onboarding",
    )
    create_tables: bool = os.getenv("CREATE_TABLES", "true").lower() in ("1", "true", "yes")
    cors_origins: list[str] = os.getenv("CORS_ORIGINS", "*").split(",")
    log_level: str = os.getenv("LOG_LEVEL", "INFO")


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()


settings = get_settings()
