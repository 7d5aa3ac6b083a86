from __future__ import annotations

from functools import lru_cache
import json
from typing import Annotated, Literal

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


class Settings(BaseSettings):
    # Load from env vars in production/docker, but also support local dev via .env.
    model_config = SettingsConfigDict(env_file=(".env", "../.env"), extra="ignore")

    app_name: str = Field(default="apiconv", validation_alias=AliasChoices("APP_NAME", "app_name"))

    environment: Literal["development", "production", "test"] = Field(
        default="development",
        validation_alias=AliasChoices("ENV", "ENVIRONMENT", "environment"),
    )

    log_level: str = Field(default="INFO", validation_alias=AliasChoices("LOG_LEVEL", "log_level"))

    # Language of validation messages.
    locale: Literal["en", "zh"] = Field(default="en", validation_alias=AliasChoices("LOCALE", "APP_LOCALE", "locale"))

    host: str = Field(default="0.0.0.0", validation_alias=AliasChoices("HOST", "host"))
    port: int = Field(default=8080, validation_alias=AliasChoices("PORT", "BACKEND_PORT", "port"))

    request_id_header: str = Field(
        default="X-Request-ID",
        validation_alias=AliasChoices("REQUEST_ID_HEADER", "request_id_header"),
    )

    # Extra code -> HTTP status overrides, merged over the built-in ones at startup.
    # Accepts a JSON object ({"2001004": 401}) or comma-separated pairs (2001004=401,2001005=404).
    status_overrides: Annotated[dict[int, int], NoDecode] = Field(
        default_factory=dict,
        validation_alias=AliasChoices("STATUS_OVERRIDES", "status_overrides"),
    )

    @field_validator("status_overrides", mode="before")
    @classmethod
    def _parse_overrides(cls, v):
        if v is None:
            return {}
        if isinstance(v, dict):
            return v
        if isinstance(v, str):
            raw = v.strip()
            if not raw:
                return {}
            if raw.startswith("{"):
                parsed = json.loads(raw)
                if not isinstance(parsed, dict):
                    raise ValueError("STATUS_OVERRIDES must be a JSON object")
                return parsed

            pairs: dict[str, str] = {}
            for item in raw.split(","):
                if not item.strip():
                    continue
                code, sep, http_status = item.partition("=")
                if not sep:
                    raise ValueError(f"Invalid status override {item.strip()!r}; expected code=status")
                pairs[code.strip()] = http_status.strip()
            return pairs
        return v

    @field_validator("log_level")
    @classmethod
    def _upper_level(cls, v: str) -> str:
        return v.strip().upper()


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
