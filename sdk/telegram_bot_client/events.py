"""Snapshots handed to request/response observers."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Awaitable, Callable

import httpx


@dataclass(frozen=True)
class ApiRequestEvent:
    """A request that is about to be sent.

    The same instance is passed to the response observers of the call, so
    request/response pairs can be correlated by identity.
    """

    method_name: str
    http_request: httpx.Request

    @property
    def content(self) -> bytes | None:
        """Outgoing body, ``None`` for streamed (multipart) uploads."""
        try:
            return self.http_request.content
        except httpx.RequestNotRead:
            return None


@dataclass(frozen=True)
class ApiResponseEvent:
    request_event: ApiRequestEvent
    http_response: httpx.Response

    @property
    def method_name(self) -> str:
        return self.request_event.method_name

    @property
    def status_code(self) -> int:
        return self.http_response.status_code


RequestObserver = Callable[[ApiRequestEvent], Awaitable[None]]
ResponseObserver = Callable[[ApiResponseEvent], Awaitable[None]]
