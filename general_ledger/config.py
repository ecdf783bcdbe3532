"""
Application configuration.

All configuration is loaded from environment variables.
Never hardcode secrets or connection strings in code.
"""

import os
from functools import lru_cache

from dotenv import load_dotenv

# Load .env file into environment variables
load_dotenv()


# Well-known account roles used by the subledger workflows.
# Each role maps to a code in the chart of accounts and can be
# overridden per deployment with ACCOUNT_CODE_<ROLE>.
DEFAULT_ACCOUNT_CODES: dict[str, str] = {
    "CASH": "1000",
    "BANK": "1010",
    "ACCOUNTS_RECEIVABLE": "1100",
    "INVENTORY": "1200",
    "VAT_INPUT": "1310",
    "ACCOUNTS_PAYABLE": "2000",
    "VAT_OUTPUT": "2100",
    "PAYE_PAYABLE": "2110",
    "SOCIAL_SECURITY_PAYABLE": "2120",
    "HEALTH_PAYABLE": "2130",
    "OPENING_BALANCE_EQUITY": "3900",
    "SALES_REVENUE": "4000",
    "SALARIES_EXPENSE": "5100",
}


class Settings:
    """Application settings loaded from environment variables."""

    # Application
    APP_NAME: str = "General Ledger"
    APP_VERSION: str = "0.1.0"
    DEBUG: bool = os.getenv("DEBUG", "false").lower() == "true"
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    # Server
    HOST: str = os.getenv("HOST", "0.0.0.0")
    PORT: int = int(os.getenv("PORT", "8000"))

    # Database
    DATABASE_URL: str = os.getenv(
        "DATABASE_URL",
        "postgresql://localhost:5432/general_ledger"
    )

    # Environment
    ENVIRONMENT: str = os.getenv("ENVIRONMENT", "development")

    # Ledger
    FUNCTIONAL_CURRENCY: str = os.getenv("FUNCTIONAL_CURRENCY", "KES")
    MONEY_DECIMAL_PLACES: int = int(os.getenv("MONEY_DECIMAL_PLACES", "2"))
    DEFAULT_PAYMENT_TERMS_DAYS: int = int(
        os.getenv("DEFAULT_PAYMENT_TERMS_DAYS", "30")
    )

    # Tax
    JURISDICTION: str = os.getenv("JURISDICTION", "KE")
    TAX_TABLES_PATH: str | None = os.getenv("TAX_TABLES_PATH")

    def __init__(self):
        self.ACCOUNT_CODES = {
            role: os.getenv(f"ACCOUNT_CODE_{role}", code)
            for role, code in DEFAULT_ACCOUNT_CODES.items()
        }

    def account_code(self, role: str) -> str:
        """Return the configured chart code for a well-known role."""
        return self.ACCOUNT_CODES[role]


@lru_cache()
def get_settings() -> Settings:
    """
    Return cached settings instance.

    Using lru_cache means the Settings object is created once
    and reused for all subsequent calls. This avoids reading
    environment variables repeatedly.
    """
    return Settings()
