from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    APP_NAME: str = "Wallet Settlement Service"
    version: str = "0.1.0"
    DEBUG: bool = False
    APP_DATABASE_DSN: str = "sqlite:////tmp/settlement.db"
    REDIS_URL: str = "redis://localhost:6379"

    # CORS
    CORS_ORIGINS: str = "http://localhost:3000,http://localhost:5173"

    # Wallet ledger
    WALLET_CURRENCY: str = "INR"  # single-currency wallets; display only
    SETTLEMENT_REFERENCE_PREFIX: str = "settlement"
    ADMIN_ADJUSTMENT_REFERENCE_PREFIX: str = "admin"

    # Reconciliation: ignore debits younger than this so in-flight
    # settlements are not picked up mid-transaction.
    RECONCILIATION_GRACE_MINUTES: int = 5
    RECONCILIATION_BATCH_SIZE: int = 100


settings = Settings()
