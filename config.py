from typing import List

from pydantic_settings import BaseSettings

class Settings(BaseSettings):
    # Licensing backends, queried in priority order.
    # Each URL already carries its own query string.
    LICENSE_API_MIRRORS: List[str] = [
        "https://epiph.yt/wocommerce/?wc-api=software-api",
        "https://epiph.yt/en/wocommerce/?wc-api=software-api",
    ]
    LICENSE_API_TIMEOUT: float = 30

    # Validation policy
    DEFAULT_SOFTWARE_VERSION: str = "1.0"
    ALLOW_EMPTY_ACTIVATIONS: bool = False  # Legacy: a license with no activations passes

    # Service Info
    SERVICE_NAME: str = "license-gate"
    APP_VERSION: str = "1.0.0"
    LOG_LEVEL: str = "INFO"

    # Database (request log)
    DATABASE_URL: str = "sqlite:///./license_gate.db"

    class Config:
        env_file = ".env"

settings = Settings()
