from decimal import Decimal
from functools import lru_cache
from typing import List, Optional
from urllib.parse import quote_plus
from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from constants.currencies import IVA_RATE, Currency


class Settings(BaseSettings):
    """
    Centralized application configuration loaded from environment variables.
    Uses Pydantic's BaseSettings for robust env parsing and validation.
    """

    # App
    APP_NAME: str = "Gestión de Órdenes y Facturas"
    ENVIRONMENT: str = "development"  # development | staging | production
    DEBUG: bool = True
    LOG_LEVEL: str = "INFO"

    # Database (support single URL or split parts)
    DATABASE_URL: Optional[str] = None
    DB_SCHEME: str = "postgresql+psycopg"
    DB_HOST: str = "localhost"
    DB_PORT: int = 5432
    DB_USER: str = "postgres"
    DB_PASSWORD: str = "postgres"
    DB_NAME: str = "erp_compras"
    # Create tables on startup (local/dev). In prod, use Alembic migrations.
    DB_CREATE_ALL: bool = True

    # CORS
    # Comma-separated origins, e.g. "http://localhost:3000,https://myapp.com"
    ALLOWED_ORIGINS: str = "http://localhost:3000"

    # Security middleware toggles
    ENABLE_RATE_LIMITER: bool = True
    RATE_LIMIT_REQUESTS: int = 100  # requests
    RATE_LIMIT_WINDOW_SECONDS: int = 60  # per this many seconds
    RATE_LIMIT_STORAGE_URI: Optional[str] = None  # e.g., "redis://localhost:6379"

    # Business defaults
    MONEDA_BASE: str = "CLP"
    IVA_TASA: Decimal = Decimal(IVA_RATE)

    # Storage / S3 (documents attached to orders and invoices)
    AWS_S3_BUCKET: Optional[str] = None
    AWS_REGION: Optional[str] = None
    # Optional explicit credentials (boto3 can also read from environment/instance profile)
    AWS_ACCESS_KEY_ID: Optional[str] = None
    AWS_SECRET_ACCESS_KEY: Optional[str] = None
    AWS_SESSION_TOKEN: Optional[str] = None
    MAX_UPLOAD_MB: int = 10

    # Pydantic v2 settings configuration
    model_config = SettingsConfigDict(env_file=".env", case_sensitive=True, extra="ignore")

    @property
    def allowed_origins_list(self) -> List[str]:
        """
        Parses comma-separated origins into a list. Trims spaces, omits empties.
        """
        return [o.strip() for o in self.ALLOWED_ORIGINS.split(",") if o.strip()]

    def build_database_url(self) -> str:
        """
        Compose a SQLAlchemy URL from individual DB_* parts when DATABASE_URL is not provided.
        """
        if self.DATABASE_URL:
            return str(self.DATABASE_URL)
        return f"{self.DB_SCHEME}://{self.DB_USER}:{quote_plus(self.DB_PASSWORD)}@{self.DB_HOST}:{self.DB_PORT}/{self.DB_NAME}"

    @field_validator("DEBUG", "DB_CREATE_ALL", "ENABLE_RATE_LIMITER", mode="before")
    def _normalize_bool(cls, v):
        # Accept "1", "true", "True", etc.
        if isinstance(v, str):
            return v.lower() in ("1", "true", "yes", "on")
        return bool(v)

    @field_validator("MONEDA_BASE", mode="before")
    def _normalize_currency(cls, v):
        # Unknown codes fail at startup instead of on the first create
        return Currency(str(v).strip().upper()).value


@lru_cache()
def get_settings() -> Settings:
    """
    Cached settings instance to avoid re-parsing env on each import.
    """
    return Settings()
