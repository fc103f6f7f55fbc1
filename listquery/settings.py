from __future__ import annotations

from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    db_url: str = Field("sqlite:///./listquery.db", validation_alias="LISTQUERY_DB_URL")
    store: Literal["sql", "memory"] = Field("sql", validation_alias="LISTQUERY_STORE")
    default_page_size: int = Field(10, ge=1, validation_alias="LISTQUERY_DEFAULT_PAGE_SIZE")
    max_page_size: int = Field(100, ge=1, validation_alias="LISTQUERY_MAX_PAGE_SIZE")
    api_base_url: str = Field("http://localhost:8000", validation_alias="LISTQUERY_API_BASE_URL")
    http_timeout: float = Field(10.0, validation_alias="LISTQUERY_HTTP_TIMEOUT")
    search_debounce_ms: int = Field(300, ge=0, validation_alias="LISTQUERY_SEARCH_DEBOUNCE_MS")
    log_level: str = Field("INFO", validation_alias="LISTQUERY_LOG_LEVEL")

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
    )


settings = Settings()
