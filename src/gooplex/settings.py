from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field, SecretStr

DEFAULT_URLS: dict[str, str] = {
    "open": "https://www.gooplex.com.br/open/v1",
    "signed": "https://www.gooplex.com.br/open/v1",
    "api": "https://api.binance.com/api",
    "public": "https://api.binance.com/api/v3",
    "private": "https://api.binance.com/api/v3",
}


class FeeSettings(BaseModel):
    maker: float = Field(default=0.0022, ge=0)
    taker: float = Field(default=0.0022, ge=0)

    model_config = {"extra": "forbid", "frozen": True}


class Credentials(BaseModel):
    api_key: SecretStr | None = None
    secret: SecretStr | None = None

    model_config = {"extra": "forbid", "frozen": True}

    @property
    def complete(self) -> bool:
        return bool(
            self.api_key
            and self.api_key.get_secret_value()
            and self.secret
            and self.secret.get_secret_value()
        )


class AdapterSettings(BaseModel):
    exchange: str = "gooplex"
    recv_window: int = Field(default=5000, gt=0)
    timeout: float = Field(default=10.0, gt=0)
    user_agent: str = "gooplex-adapter/0.1"
    fees: FeeSettings = Field(default_factory=FeeSettings)
    urls: dict[str, str] = Field(default_factory=lambda: dict(DEFAULT_URLS))
    signed_apis: tuple[str, ...] = ("signed", "private")
    credentials: Credentials = Field(default_factory=Credentials)

    model_config = {"extra": "forbid", "frozen": True}

    def redacted(self) -> dict[str, Any]:
        data = self.model_dump(mode="json")
        creds = data.get("credentials")
        if isinstance(creds, dict):
            for key in ("api_key", "secret"):
                if creds.get(key) is not None:
                    creds[key] = "***"
        return data
