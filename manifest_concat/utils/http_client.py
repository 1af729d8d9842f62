"""HTTP helpers for manifest and source-list requests."""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Any, Optional
from urllib.parse import unquote, urlparse

import aiohttp
import requests
from pydantic import BaseModel

USER_AGENT = "manifest-concat/0.1"

DEFAULT_HEADERS = {
    "user-agent": USER_AGENT,
    "accept": "*/*",
}

# Status reported for bodies read from the local filesystem.
LOCAL_STATUS = 0


class HttpResponse(BaseModel):
    status_code: int
    body: str


def _local_path(url: str) -> Optional[str]:
    parsed = urlparse(url)
    if parsed.scheme == "file":
        return unquote(parsed.path)
    if parsed.scheme in {"http", "https"}:
        return None
    # Windows drive letters parse as a one-character scheme.
    if parsed.scheme == "" or len(parsed.scheme) == 1:
        return url
    return None


class HttpClient:
    """Fetches manifest bodies asynchronously and small JSON documents synchronously."""

    def __init__(self, timeout: int = 10) -> None:
        self.timeout = timeout
        self._headers = DEFAULT_HEADERS.copy()
        self._session = requests.Session()
        self._session.headers.update(self._headers)

        self._async_session: Optional[aiohttp.ClientSession] = None
        self._async_lock: Optional[asyncio.Lock] = None
        self._loop: Optional[asyncio.AbstractEventLoop] = None

    async def get(self, url: str) -> HttpResponse:
        """GET ``url`` and return its status and text body.

        Transport failures raise ``aiohttp.ClientError`` or ``OSError``; the
        status code is returned as-is for the caller to judge.
        """

        path = _local_path(url)
        if path is not None:
            logging.debug("Reading local manifest %s", path)
            with open(path, "r", encoding="utf-8", errors="replace") as handle:
                return HttpResponse(status_code=LOCAL_STATUS, body=handle.read())

        session = await self._get_async_session()
        async with session.get(url) as resp:
            body = await resp.text(errors="replace")
            logging.debug("GET %s -> %s (%s bytes)", url, resp.status, len(body))
            return HttpResponse(status_code=resp.status, body=body)

    def fetch_json(self, url: str) -> Any:
        """Fetch a JSON document (e.g., a remote list of sources)."""

        path = _local_path(url)
        if path is not None:
            with open(path, "r", encoding="utf-8") as handle:
                return json.load(handle)

        try:
            response = self._session.get(url, timeout=self.timeout)
            response.raise_for_status()
            return response.json()
        except requests.RequestException as exc:  # pragma: no cover - network errors
            logging.error("Fetching %s failed: %s", url, exc)
            raise

    async def _get_async_session(self) -> aiohttp.ClientSession:
        current_loop = asyncio.get_running_loop()
        if self._async_session:
            if (
                self._async_session.closed
                or not self._loop
                or self._loop.is_closed()
                or self._loop is not current_loop
            ):
                await self._shutdown_async_session()
                self._async_lock = None

        if self._async_lock is None:
            self._async_lock = asyncio.Lock()

        async with self._async_lock:
            if self._async_session and not self._async_session.closed:
                return self._async_session
            self._async_session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self.timeout),
                headers=self._headers.copy(),
            )
            self._loop = current_loop
        return self._async_session

    async def _shutdown_async_session(self) -> None:
        if self._async_session and not self._async_session.closed:
            try:
                await self._async_session.close()
            except (aiohttp.ClientError, RuntimeError, OSError) as exc:
                # A session bound to a closed loop cannot flush its connector.
                logging.debug("Discarding stale HTTP session: %s", exc)
        self._async_session = None
        self._loop = None

    async def aclose(self) -> None:
        await self._shutdown_async_session()

    def close(self) -> None:
        self._session.close()

    async def __aenter__(self) -> "HttpClient":
        return self

    async def __aexit__(self, exc_type, exc_value, traceback) -> None:
        await self.aclose()
        self.close()
