# wilaya_api/config.py
import os
from functools import lru_cache
from pathlib import Path
from typing import List

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

PACKAGE_ROOT = Path(__file__).resolve().parent
DELIVERY_ROOT = PACKAGE_ROOT / "delivery"


class Settings(BaseSettings):
    # === General app settings ===
    app_name: str = "Algeria Wilayas & Communes API"
    app_version: str = "1.0.0"
    app_env: str = "local"  # local | development | production
    port: int = 3001

    # === Reference data (loaded once at startup) ===
    regions_path: str = str(DELIVERY_ROOT / "data" / "algeria_wilayas_communes.json")
    delivery_prices_path: str = str(DELIVERY_ROOT / "data" / "wilayas-delivery.json")
    rules_path: str = str(DELIVERY_ROOT / "rules" / "delivery_estimation.yaml")

    # === CORS ===
    allowed_origins: str = Field("*", description="Comma separated origins, '*' for any")

    # === Logging ===
    log_level: str = "INFO"

    # === Rate Limiting ===
    rate_limit_enabled: bool = True
    rate_limit: str = "100 per 15 minutes"

    # === Pydantic Settings config ===
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @property
    def allowed_origins_list(self) -> List[str]:
        origins = [o.strip() for o in self.allowed_origins.split(",") if o.strip()]
        return origins or ["*"]


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Singleton Settings instance with simple env overrides."""
    s = Settings()

    env = os.getenv("ENVIRONMENT", s.app_env).lower()
    if env == "production":
        s.log_level = "WARNING"
    elif env == "development":
        s.log_level = "DEBUG"

    return s
