from decimal import Decimal
from functools import lru_cache
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Core
    project_name: str = "Ledger API"
    api_v1_prefix: str = "/api/v1"

    # Database
    database_url: str = "sqlite:///./ledger.db"
    database_echo: bool = False
    auto_create_schema: bool = True

    # Logging
    log_level: str = "INFO"

    # ============================================
    # CHART OF CODES
    # ============================================
    code_group_digits: int = 2
    code_general_digits: int = 4
    # Child codes must start with their parent's code
    code_strict_prefix: bool = True

    # ============================================
    # POSTING
    # ============================================
    balance_epsilon: Decimal = Decimal("0.0001")

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"

    # Helper methods
    def is_sqlite(self) -> bool:
        """Return True when the configured store is SQLite."""
        return self.database_url.startswith("sqlite")


@lru_cache
def get_settings() -> Settings:
    return Settings()
