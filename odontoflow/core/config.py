from pydantic_settings import BaseSettings
from typing import Optional


class Settings(BaseSettings):
    APP_NAME: str = "OdontoFlow Clinical Dashboard"
    VERSION: str = "1.0.0"
    SECRET_KEY: str = "change-me-in-production-use-strong-random-key"
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60
    REFRESH_TOKEN_EXPIRE_DAYS: int = 7

    DATABASE_URL: str = "sqlite:///./odontoflow.db"

    LOG_LEVEL: str = "INFO"

    # Remote record store used by the client core (None = local cache only)
    RECORD_STORE_URL: Optional[str] = None
    RECORD_STORE_TIMEOUT: int = 10

    # Local cache fallback
    LOCAL_CACHE_DIR: str = "./.odontoflow-cache"
    LOCAL_CACHE_NAMESPACE: str = "odontoflow_patients"

    # Dashboard
    TOP_PROCEDURES_LIMIT: int = 5

    SEED_DEMO_DATA: bool = True

    class Config:
        env_file = ".env"


settings = Settings()
