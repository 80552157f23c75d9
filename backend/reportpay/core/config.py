from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    APP_NAME: str = "reportpay"
    version: str = "0.1.0"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"
    APP_DOMAIN: str = "example.com"
    APP_DATABASE_DSN: str = "sqlite:////tmp/reportpay.db"

    # Money
    DEFAULT_CURRENCY: str = "BRL"

    # Payment authority used by the operator-side engine
    PAYMENT_AUTHORITY_URL: str = "http://localhost:8000"
    PAYMENT_AUTHORITY_TIMEOUT: float = 15.0

    # Receipt documents are rendered elsewhere; we only hand out their URL
    RECEIPT_BASE_URL: str = "http://localhost:8000/v1/report_payments"

    # CORS
    CORS_ORIGINS: str = "http://localhost:3000,http://localhost:5173"


settings = Settings()
