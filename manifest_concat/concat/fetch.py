"""Concurrent manifest requests with first-error-wins reporting."""

from __future__ import annotations

import asyncio
import logging
from typing import Callable, Dict, List, Optional, Sequence

import aiohttp

from ..exceptions import RequestError
from ..utils.http_client import HttpClient

ACCEPTED_STATUSES = frozenset({200, 206, 0})

RequestAllCallback = Callable[..., None]


class _PendingRequests:
    """Completion barrier for one batch of requests.

    ``callback`` fires once: with every body after the last success, or with
    the first error. Setting ``remaining`` to zero on error silences the
    requests still in flight.
    """

    def __init__(self, count: int, callback: RequestAllCallback) -> None:
        self.remaining = count
        self.responses: Dict[str, str] = {}
        self._callback = callback

    def succeed(self, url: str, body: str) -> None:
        if self.remaining <= 0:
            return
        self.remaining -= 1
        self.responses[url] = body
        if self.remaining == 0:
            self._callback(None, self.responses)

    def fail(self, error: RequestError) -> None:
        if self.remaining <= 0:
            return
        self.remaining = 0
        self._callback(error)


class FetchCoordinator:
    """Requests a batch of URLs at once and reports the outcome exactly once."""

    def __init__(self, http_client: HttpClient) -> None:
        self._http_client = http_client

    def dispatch(self, urls: Sequence[str], callback: RequestAllCallback) -> List[asyncio.Task]:
        """Starts one task per URL; ``callback(error, responses)`` is called once.

        Must be called from a running event loop.
        """

        pending = _PendingRequests(len(urls), callback)
        if not urls:
            callback(None, {})
            return []
        return [asyncio.ensure_future(self._fetch(url, pending)) for url in urls]

    async def request_all(self, urls: Sequence[str]) -> Dict[str, str]:
        """Returns ``{url: body}`` for every URL or raises the first :class:`RequestError`."""

        outcome: asyncio.Future = asyncio.get_running_loop().create_future()

        def complete(error: Optional[RequestError], responses: Optional[Dict[str, str]] = None) -> None:
            if error is not None:
                outcome.set_exception(error)
            else:
                outcome.set_result(responses)

        logging.info("Requesting %s manifest(s)", len(urls))
        tasks = self.dispatch(urls, complete)
        try:
            return await outcome
        finally:
            for task in tasks:
                if not task.done():
                    task.cancel()
            if tasks:
                await asyncio.gather(*tasks, return_exceptions=True)

    async def _fetch(self, url: str, pending: _PendingRequests) -> None:
        try:
            response = await self._http_client.get(url)
        except (aiohttp.ClientError, asyncio.TimeoutError, OSError) as exc:
            logging.debug("Request to %s failed: %s", url, exc)
            pending.fail(RequestError(str(exc) or "Request failed", url=url))
            return
        except Exception as exc:
            # Anything else would leave the batch waiting forever.
            logging.warning("Unexpected error requesting %s: %r", url, exc)
            pending.fail(RequestError(f"Request failed: {exc}", url=url))
            return

        if response.status_code not in ACCEPTED_STATUSES:
            logging.debug("Request to %s returned status %s", url, response.status_code)
            pending.fail(RequestError("Request failed", url=url, status_code=response.status_code))
            return
        pending.succeed(url, response.body)
