"""aiohttp transport executing signed requests."""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Any, Protocol

import aiohttp

from ..errors import BadResponse, NetworkError
from .signer import SignedRequest

logger = logging.getLogger(__name__)


class Transport(Protocol):
    """Executes a fully built request and returns the decoded JSON body."""

    async def send(self, request: SignedRequest) -> Any:
        ...

    async def close(self) -> None:
        ...


class HttpTransport:
    """Transport backed by a lazily created ``aiohttp.ClientSession``.

    Retries and rate limiting are left to the caller.
    """

    def __init__(self, timeout: float = 10.0, proxy: str | None = None):
        self.timeout = timeout
        self.proxy = proxy
        self.session: aiohttp.ClientSession | None = None

    async def _ensure_session(self) -> aiohttp.ClientSession:
        if self.session is None:
            connector = aiohttp.TCPConnector()
            self.session = aiohttp.ClientSession(
                connector=connector,
                timeout=aiohttp.ClientTimeout(total=self.timeout),
            )
        return self.session

    async def send(self, request: SignedRequest) -> Any:
        session = await self._ensure_session()
        logger.debug("%s %s", request.method, request.url.split("?")[0])
        try:
            async with session.request(
                request.method,
                request.url,
                headers=request.headers,
                data=request.body,
                proxy=self.proxy,
            ) as resp:
                try:
                    text = await resp.text()
                except UnicodeDecodeError as exc:
                    raise BadResponse(
                        f"undecodable response from {request.url.split('?')[0]}: {exc.reason}"
                    ) from exc
                if resp.status >= 400:
                    raise NetworkError(
                        f"{request.method} {request.url.split('?')[0]} failed: {resp.status}",
                        status=resp.status,
                        body=text,
                    )
        except (aiohttp.ClientError, asyncio.TimeoutError) as exc:
            raise NetworkError(f"{request.method} {request.url.split('?')[0]} failed: {exc}") from exc

        if not text:
            return None
        try:
            return json.loads(text)
        except json.JSONDecodeError as exc:
            raise BadResponse(f"non-JSON response from {request.url.split('?')[0]}") from exc

    async def close(self) -> None:
        if self.session:
            await self.session.close()
            self.session = None
