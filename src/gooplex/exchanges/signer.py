"""Request construction and HMAC signing for private endpoints."""

from __future__ import annotations

import hashlib
import hmac
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Mapping
from urllib.parse import urlencode

from ..errors import AuthenticationError, NotSupported
from ..settings import AdapterSettings


def now_ms() -> int:
    """Wall clock in epoch milliseconds, the default clock for nonces."""
    return int(time.time() * 1000)


@dataclass(frozen=True)
class SignedRequest:
    url: str
    method: str
    headers: dict[str, str] = field(default_factory=dict)
    body: str | None = None


class Signer:
    """Builds URLs, headers and bodies for public and signed API classes.

    A signed query is the caller params followed by ``timestamp`` and
    ``recvWindow``, url-encoded with list values repeated per key, then
    ``&signature=<hex HMAC-SHA256 of the query keyed by the secret>``.
    """

    def __init__(self, settings: AdapterSettings, clock: Callable[[], int] = now_ms):
        self.settings = settings
        self.clock = clock
        self._last_nonce = 0

    @property
    def api_key(self) -> str | None:
        key = self.settings.credentials.api_key
        return key.get_secret_value() if key else None

    @property
    def secret(self) -> str | None:
        secret = self.settings.credentials.secret
        return secret.get_secret_value() if secret else None

    def base_url(self, api: str) -> str:
        try:
            return self.settings.urls[api].rstrip("/")
        except KeyError:
            raise NotSupported(f"no base URL configured for {api} endpoints") from None

    def is_signed(self, api: str) -> bool:
        return api in self.settings.signed_apis

    def nonce(self) -> int:
        """Current time in ms, bumped so that it never repeats or goes back."""
        now = self.clock()
        if now <= self._last_nonce:
            now = self._last_nonce + 1
        self._last_nonce = now
        return now

    def check_required_credentials(self) -> None:
        if not self.settings.credentials.complete:
            raise AuthenticationError("signed endpoints require apiKey and secret credentials")

    @staticmethod
    def generate_signature(secret: str, message: str) -> str:
        return hmac.new(secret.encode(), message.encode(), hashlib.sha256).hexdigest()

    def signed_query(self, params: Mapping[str, Any]) -> str:
        query: dict[str, Any] = dict(params)
        query.pop("timestamp", None)
        query["timestamp"] = self.nonce()
        query["recvWindow"] = params.get("recvWindow", self.settings.recv_window)
        encoded = urlencode(query, doseq=True)
        return f"{encoded}&signature={self.generate_signature(self.secret or '', encoded)}"

    def sign(
        self,
        path: str,
        api: str = "open",
        method: str = "GET",
        params: Mapping[str, Any] | None = None,
    ) -> SignedRequest:
        params = dict(params or {})
        method = method.upper()
        url = f"{self.base_url(api)}/{path}"
        headers: dict[str, str] = {"User-Agent": self.settings.user_agent}
        body = None

        if self.is_signed(api):
            self.check_required_credentials()
            headers["X-MBX-APIKEY"] = self.api_key or ""
            url += "?" + self.signed_query(params)
        elif params:
            if method == "GET":
                url += "?" + urlencode(params, doseq=True)
            else:
                body = urlencode(params, doseq=True)
                headers["Content-Type"] = "application/x-www-form-urlencoded"

        return SignedRequest(url=url, method=method, headers=headers, body=body)
