"""Shared request plumbing used by every adapter."""

from __future__ import annotations

import logging
from typing import Any, Callable, Mapping

from ..errors import ArgumentsRequired
from ..settings import AdapterSettings
from .signer import Signer, now_ms
from .transport import HttpTransport, Transport

logger = logging.getLogger(__name__)


class ApiClient:
    """Signs a primitive endpoint call and hands it to the transport.

    Adapters hold one of these rather than inheriting from a common base, so
    that two adapters can share the same signer, nonce and HTTP session.
    """

    def __init__(
        self,
        settings: AdapterSettings,
        transport: Transport | None = None,
        clock: Callable[[], int] = now_ms,
    ):
        self.settings = settings
        self.clock = clock
        self.signer = Signer(settings, clock)
        self.transport: Transport = transport or HttpTransport(timeout=settings.timeout)

    def milliseconds(self) -> int:
        return self.clock()

    async def request(
        self,
        api: str,
        path: str,
        method: str = "GET",
        params: Mapping[str, Any] | None = None,
    ) -> Any:
        request = self.signer.sign(path, api, method, params)
        logger.debug("Calling %s %s/%s", method, api, path)
        return await self.transport.send(request)

    async def close(self) -> None:
        await self.transport.close()


def require_argument(value: Any, name: str, operation: str) -> None:
    """Raise ArgumentsRequired before any network call when ``value`` is missing."""
    if value is None:
        raise ArgumentsRequired(f"{operation} requires a {name} argument")
