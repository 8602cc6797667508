"""
Process configuration, read once from the environment (or a .env file) and
handed to the services that need it. Nothing below this layer reads os.environ.
"""
import warnings
from functools import lru_cache
from typing import Optional

from pydantic_settings import BaseSettings

PAYU_TEST_URL = "https://test.payu.in/_payment"
PAYU_PROD_URL = "https://secure.payu.in/_payment"

_INSECURE_DEFAULT = "insecure-default-change-me"


class Settings(BaseSettings):
    app_name: str = "Storefront"
    log_level: str = "INFO"

    # Database
    database_url: Optional[str] = None
    postgres_user: str = "postgres"
    postgres_password: str = "postgres"
    postgres_host: str = "localhost"  # In Docker, this will be 'postgres'
    postgres_port: str = "5433"
    postgres_db: str = "storefront"
    sql_echo: bool = False

    # PayU hosted checkout
    payu_mode: str = "TEST"  # TEST or LIVE
    payu_merchant_key: str = ""
    payu_merchant_salt: str = ""

    # Public URLs: BASE_URL receives gateway callbacks, FRONTEND_URL serves landing pages
    base_url: str = "http://localhost:5000"
    frontend_url: Optional[str] = None

    # Admin auth
    jwt_secret_key: str = ""
    jwt_algorithm: str = "HS256"
    access_token_expire_minutes: int = 60
    initial_admin_email: str = ""
    initial_admin_password: str = ""

    # Rate limits (slowapi syntax)
    checkout_rate_limit: str = "30/minute"
    login_rate_limit: str = "10/minute"

    # Tracing is only wired up when an OTLP collector is configured
    otlp_endpoint: Optional[str] = None

    class Config:
        env_file = ".env"
        case_sensitive = False
        extra = "ignore"

    @property
    def sqlalchemy_url(self) -> str:
        if self.database_url:
            return self.database_url
        return (
            f"postgresql+asyncpg://{self.postgres_user}:{self.postgres_password}"
            f"@{self.postgres_host}:{self.postgres_port}/{self.postgres_db}"
        )

    @property
    def payment_url(self) -> str:
        return PAYU_PROD_URL if self.payu_mode.upper() == "LIVE" else PAYU_TEST_URL

    @property
    def landing_base_url(self) -> str:
        return (self.frontend_url or self.base_url).rstrip("/")

    @property
    def callback_base_url(self) -> str:
        return self.base_url.rstrip("/")


def _apply_insecure_defaults(settings: Settings) -> Settings:
    # Missing secrets fall back with a warning instead of failing at import
    if not settings.jwt_secret_key:
        warnings.warn(
            "JWT_SECRET_KEY is not set. Using an insecure default. "
            "Set this env var in production!",
            stacklevel=2,
        )
        settings.jwt_secret_key = _INSECURE_DEFAULT
    if not settings.payu_merchant_key or not settings.payu_merchant_salt:
        warnings.warn(
            "PAYU_MERCHANT_KEY / PAYU_MERCHANT_SALT are not set. "
            "Gateway signatures will not verify.",
            stacklevel=2,
        )
    return settings


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    return _apply_insecure_defaults(Settings())
