from pydantic_settings import BaseSettings
from typing import Optional, Literal
from pathlib import Path
from decimal import Decimal

# Find .env file - check app/ directory first, then project root
BASE_DIR = Path(__file__).resolve().parent.parent.parent
APP_ENV = BASE_DIR / "app" / ".env"
ROOT_ENV = BASE_DIR / ".env"

# Use app/.env if it exists, otherwise try root .env
env_file = str(APP_ENV) if APP_ENV.exists() else (str(ROOT_ENV) if ROOT_ENV.exists() else ".env")


class Settings(BaseSettings):
    # Database
    DATABASE_URL: str

    # Ledger rules
    INTEREST_RATE: Decimal = Decimal("0.10")  # Charged on hulam + hulam put-up when an entry is written
    PUT_UP_PER_LAWAS: Decimal = Decimal("2000")  # Membership fee per share
    ROLLOVER_INTEREST_POLICY: Literal["defer", "charge"] = "defer"

    # Audit
    AUDIT_LOG_DIR: Optional[str] = None

    # Application
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    class Config:
        env_file = env_file
        case_sensitive = True


settings = Settings()

# Derived paths
LOGS_DIR = Path(settings.AUDIT_LOG_DIR) if settings.AUDIT_LOG_DIR else BASE_DIR / "logs"
