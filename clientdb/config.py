# clientdb/config.py
from pathlib import Path
from pydantic_settings import BaseSettings
from typing import Optional

PACKAGE_DIR = Path(__file__).resolve().parent


class Settings(BaseSettings):
    # Environment
    ENVIRONMENT: str = "development"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"
    APP_NAME: str = "Client Information Database"
    APP_VERSION: str = "1.0.0"

    # Server
    HOST: str = "0.0.0.0"
    PORT: int = 8080
    GRACEFUL_SHUTDOWN_TIMEOUT: int = 30
    # Runs behind a TLS-terminating proxy; trust its X-Forwarded-For
    FORWARDED_ALLOW_IPS: str = "*"

    # Database
    DATABASE_URL: Optional[str] = None
    DB_POOL_SIZE: int = 10
    DB_MAX_OVERFLOW: int = 20

    # Secrets (production only)
    DATABASE_URL_SECRET: str = "DATABASE_URL"
    SECRETS_PROJECT: Optional[str] = None
    AWS_REGION: str = "us-east-1"

    # Rate limiting on /api
    RATE_LIMIT_WINDOW_SECONDS: int = 15 * 60
    RATE_LIMIT_MAX_REQUESTS: int = 100

    # Pagination
    DEFAULT_PAGE_SIZE: int = 10
    MAX_PAGE_SIZE: int = 100

    # Static assets
    ASSET_HOST: str = "https://cdn.jsdelivr.net"
    STATIC_DIR: Path = PACKAGE_DIR / "public"

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT.lower() == "production"

    class Config:
        env_file = ".env"
        case_sensitive = True
        extra = "ignore"
