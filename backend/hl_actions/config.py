from functools import lru_cache
from pathlib import Path

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """
    Application configuration.

    Everything the action handlers need from the environment lives here and is
    resolved once per process (see `get_settings`). Handlers never read
    `os.environ` directly; they receive this object through FastAPI
    dependencies so tests can swap it out.
    """

    # SQLite database next to the backend directory by default.
    BASE_DIR: Path = Path(__file__).resolve().parent.parent
    SQLITE_DB_PATH: Path = BASE_DIR / "hyperliquid_actions.db"
    DATABASE_URL: str = f"sqlite:///{SQLITE_DB_PATH}"

    # Chain RPC endpoints, one per environment. RPC_URL is the shared fallback.
    ARBITRUM_RPC_URL: str | None = None
    ARBITRUM_SEPOLIA_RPC_URL: str | None = None
    RPC_URL: str | None = None

    # Mark-price gateway used to price market orders.
    PRICE_GATEWAY_URL: str | None = Field(
        default=None,
        validation_alias=AliasChoices("PRICE_GATEWAY_URL", "OPENPOND_GATEWAY_URL"),
    )
    PRICE_GATEWAY_TIMEOUT_SECONDS: float | None = 10.0

    # Signing key. When an API (agent) wallet trades for a main account,
    # HYPERLIQUID_ACCOUNT_ADDRESS is the main account's address.
    HYPERLIQUID_PRIVATE_KEY: str | None = None
    HYPERLIQUID_ACCOUNT_ADDRESS: str | None = None

    # Builder fee approval target.
    HYPERLIQUID_BUILDER_ADDRESS: str | None = None
    HYPERLIQUID_BUILDER_MAX_FEE_RATE: str = "0.1%"

    EXCHANGE_TIMEOUT_SECONDS: float | None = 10.0
    STATUS_MAX_WORKERS: int = 8

    ACTION_SOURCE: str = "hyperliquid"
    LOG_LEVEL: str = "INFO"
    CORS_ORIGINS: list[str] = [
        "http://127.0.0.1:5173",
        "http://localhost:5173",
    ]

    # Refuse to start when required keys are missing.
    REQUIRE_CONFIG_ON_STARTUP: bool = True

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"

    def missing_required(self) -> list[str]:
        """
        Names of the settings that must be present for every handler to work.

        The RPC URLs count as present when the shared RPC_URL fallback is set.
        """
        required = {
            "ARBITRUM_RPC_URL": self.ARBITRUM_RPC_URL or self.RPC_URL,
            "ARBITRUM_SEPOLIA_RPC_URL": self.ARBITRUM_SEPOLIA_RPC_URL or self.RPC_URL,
            "PRICE_GATEWAY_URL": self.PRICE_GATEWAY_URL,
            "HYPERLIQUID_PRIVATE_KEY": self.HYPERLIQUID_PRIVATE_KEY,
        }
        return [name for name, value in required.items() if not value]


@lru_cache
def get_settings() -> Settings:
    return Settings()


settings = get_settings()
