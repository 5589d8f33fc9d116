"""
Error classification.

The client never decides on its own which exception a failed call turns
into: it collects what it observed into a ``FailureContext`` and hands it to
an ``ErrorClassifier``. Applications can plug their own classifier in (for
example to map flood-control errors onto a dedicated exception type)
without touching the dispatch code.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Literal, Protocol

import httpx

from .envelope import FailedApiResponse
from .exceptions import ErrorKind, TelegramAPIError, TelegramRequestError

Scope = Literal["request", "file download"]


@dataclass(frozen=True)
class FailureContext:
    scope: Scope
    status_code: int | None = None
    body: str | None = None
    envelope: FailedApiResponse | None = None
    transport_error: BaseException | None = None
    decode_error: BaseException | None = None


class ErrorClassifier(Protocol):
    def classify(self, context: FailureContext) -> TelegramRequestError: ...


def is_timeout(exc: BaseException) -> bool:
    return isinstance(exc, (httpx.TimeoutException, asyncio.CancelledError, TimeoutError))


class DefaultErrorClassifier:
    """Transport cause first, then a decoded failure envelope, then the bare HTTP status."""

    def classify(self, context: FailureContext) -> TelegramRequestError:
        if context.transport_error is not None:
            if is_timeout(context.transport_error):
                message = "Request timed out"
            elif context.scope == "file download":
                message = "Exception during file download"
            else:
                message = "Exception during making request"
            return TelegramRequestError(
                message,
                kind=ErrorKind.TRANSPORT,
                inner=context.transport_error,
            )

        envelope = context.envelope
        if envelope is not None:
            return TelegramAPIError(
                envelope.description,
                envelope.error_code,
                status_code=context.status_code,
                body=context.body,
                parameters=envelope.parameters,
            )

        return TelegramRequestError(
            f"Telegram API responded with HTTP {context.status_code}",
            kind=ErrorKind.PROTOCOL,
            status_code=context.status_code,
            body=context.body,
            inner=context.decode_error,
        )
