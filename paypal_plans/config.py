"""Configuration management using Pydantic Settings"""

from datetime import date

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables"""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # PayPal credentials
    paypal_mode: str = "sandbox"  # sandbox | live
    paypal_client_id: str = ""
    paypal_client_secret: str = ""

    # PayPal REST endpoints
    paypal_sandbox_api_base: str = "https://api-m.sandbox.paypal.com"
    paypal_live_api_base: str = "https://api-m.paypal.com"

    # Billing agreement scheduling
    recurring_start_delay_seconds: int = 60
    installment_start_delay_days: int = 1

    # Window scanned when looking up the latest sale of a subscription
    sale_history_start_date: date = date(2015, 1, 1)

    # Service
    service_name: str = "paypal-plans"
    log_level: str = "INFO"

    # HTTP Client
    http_timeout_seconds: float = 30.0


settings = Settings()
