from __future__ import annotations

from typing import Literal, cast

from pydantic import AnyHttpUrl, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=(".env",), env_prefix="", case_sensitive=False)

    # Marketplace credential; absent means synthetic listings only
    EBAY_APP_ID: str | None = None
    EBAY_FINDING_BASE: AnyHttpUrl = Field(
        default=cast(AnyHttpUrl, "https://svcs.ebay.com/services/search/FindingService/v1")
    )
    EBAY_SERVICE_VERSION: str = Field(default="1.0.0")
    EBAY_ENTRIES_PER_PAGE: int = Field(default=20, ge=1, le=100)

    USER_AGENT: str = Field(default="MyGlassCase/1.0")
    HTTP_TIMEOUT: float = Field(default=10.0, gt=0.0)

    # Pause between sequential marketplace calls
    REQUEST_DELAY_MS: int = Field(default=100, ge=0)
    COMPLETED_TERMS_LIMIT: int = Field(default=3, ge=1)
    COMPLETED_RESULTS_LIMIT: int = Field(default=10, ge=1)

    STORE_BACKEND: Literal["redis", "memory"] = Field(default="redis")
    REDIS_URL: str = Field(default="redis://localhost:6379/0")

    LOG_LEVEL: str = Field(default="INFO")

    def request_delay_seconds(self) -> float:
        return self.REQUEST_DELAY_MS / 1000.0


settings = Settings()
