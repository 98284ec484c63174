"""Application configuration from environment."""
import re
from functools import lru_cache
from pathlib import Path

from pydantic_settings import BaseSettings

PRICE_ID_RE = re.compile(r"^price_[a-zA-Z0-9_]+$")


class ConfigurationError(RuntimeError):
    """Raised at startup when required settings are missing or malformed."""


class Settings(BaseSettings):
    """App settings loaded from env / .env."""

    app_name: str = "Zabaan"
    debug: bool = False

    # Database (async driver)
    database_url: str = "sqlite+aiosqlite:///./zabaan.db"

    # Auth
    secret_key: str = "change-me-in-production-use-env"
    algorithm: str = "HS256"
    access_token_expire_minutes: int = 60 * 24 * 7  # 7 days
    auth_cookie_name: str = "zabaan_auth"
    auth_cookie_max_age: int = 60 * 60 * 24 * 14  # 14 days

    default_timezone: str = "America/Los_Angeles"

    # Billing
    billing_enabled: bool = False
    stripe_secret_key: str = ""
    stripe_price_id: str = ""
    stripe_webhook_secret: str = ""

    # DB write retry
    retry_max_attempts: int = 3
    retry_base_delay: float = 1.0
    retry_max_delay: float = 10.0

    # Logging
    log_level: str = "INFO"
    log_dir: str | None = None
    log_json: bool = False

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"

    def validate_required(self) -> None:
        """Fail fast when billing is on but its environment is incomplete."""
        if not self.billing_enabled:
            return
        missing = [
            name
            for name in ("stripe_secret_key", "stripe_price_id", "stripe_webhook_secret")
            if not getattr(self, name)
        ]
        if missing:
            raise ConfigurationError(f"Missing env var(s): {', '.join(n.upper() for n in missing)}")
        if not is_valid_price_id(self.stripe_price_id):
            raise ConfigurationError("STRIPE_PRICE_ID has an invalid format")


def is_valid_price_id(price_id: str) -> bool:
    return bool(price_id) and len(price_id) <= 50 and bool(PRICE_ID_RE.match(price_id))


@lru_cache
def get_settings() -> Settings:
    return Settings()


# Repository root (parent of zabaan/)
BASE_DIR = Path(__file__).resolve().parent.parent.parent
