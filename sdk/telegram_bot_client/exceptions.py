"""Classified errors raised by the Bot API client."""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .envelope import ResponseParameters


class ErrorKind(str, Enum):
    TRANSPORT = "transport"  # no HTTP response at all
    PROTOCOL = "protocol"  # response obtained, call rejected
    DECODE = "decode"  # body is not a well-formed envelope


class TelegramRequestError(Exception):
    """Error while calling the Telegram Bot API.

    Caller-requested cancellation is never wrapped into this type:
    ``asyncio.CancelledError`` propagates as is.
    """

    def __init__(
        self,
        message: str,
        *,
        kind: ErrorKind,
        status_code: int | None = None,
        body: str | None = None,
        inner: BaseException | None = None,
        error_code: int | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.kind = kind
        self.error_code = error_code
        self.status_code = status_code
        self.body = body
        self.inner = inner
        if inner is not None:
            self.__cause__ = inner

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}({self.message!r}, kind={self.kind.value}, "
            f"status_code={self.status_code})"
        )


class TelegramAPIError(TelegramRequestError):
    """The Bot API rejected the call with ``{"ok": false, "error_code": ...}``."""

    def __init__(
        self,
        description: str,
        error_code: int,
        *,
        status_code: int | None = None,
        body: str | None = None,
        parameters: ResponseParameters | None = None,
    ):
        super().__init__(
            description,
            kind=ErrorKind.PROTOCOL,
            status_code=status_code,
            body=body,
            error_code=error_code,
        )
        self.description = description
        self.parameters = parameters

    @property
    def retry_after(self) -> int | None:
        return self.parameters.retry_after if self.parameters else None

    @property
    def migrate_to_chat_id(self) -> int | None:
        return self.parameters.migrate_to_chat_id if self.parameters else None
