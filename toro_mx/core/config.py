from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    REDIS_URL: str = "redis://localhost:6379/0"

    QUOTE_CACHE_TTL: int = 60   # 60 seconds
    IDEMPOTENCY_TTL: int = 86400  # 24 hours

    DEFAULT_TIMEZONE: str = "America/Mexico_City"
    BASE_CURRENCY: str = "MXN"

    FX_API_URL: str = "https://api.exchangerate-api.com/v4/latest"
    FX_API_KEY: str = ""
    FX_TIMEOUT: int = 10
    FX_HISTORY_LIMIT: int = 100
    FX_REFRESH_INTERVAL: int = 7200  # 2 hours
    FX_BASE_CURRENCIES: list[str] = ["MXN", "USD"]
    FX_QUOTE_CURRENCIES: list[str] = ["MXN", "USD", "EUR"]

    PAC_PROVIDER: str = "mock"
    FACTURAMA_USER: str = ""
    FACTURAMA_PASSWORD: str = ""
    FACTURAMA_SANDBOX: bool = True
    FACTURAMA_TIMEOUT: int = 30

    CFDI_EMISOR_RFC: str = "TRM260101AB1"
    CFDI_EMISOR_NOMBRE: str = "TORO RIDE MEXICO"
    CFDI_EMISOR_REGIMEN: str = "601"
    CFDI_LUGAR_EXPEDICION: str = "06600"
    CFDI_FORMA_PAGO: str = "03"
    CFDI_METODO_PAGO: str = "PUE"

    CELERY_BROKER_URL: str = "redis://localhost:6379/1"
    CELERY_BACKEND: str = "redis://localhost:6379/2"

    API_TITLE: str = "Toro MX Driver Backend"
    API_DESCRIPTION: str = "Fare quotes, FX rates, tax retention, driver validation and CFDI for Mexico"
    API_VERSION: str = "1.0.0"

    LOG_LEVEL: str = "INFO"
    DEBUG: bool = False

    class Config:
        env_file = ".env"
        case_sensitive = True

settings = Settings()
