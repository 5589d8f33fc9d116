"""Bot API data types used by the client."""

from __future__ import annotations

import re
from typing import Any, BinaryIO

from pydantic import BaseModel, ConfigDict, Field, GetCoreSchemaHandler
from pydantic_core import core_schema

_USERNAME_FORMAT = re.compile(r"^@[a-zA-Z0-9_]{5,32}$")
_NUMERIC_FORMAT = re.compile(r"^-?[0-9]+$")
_INT64_MIN = -(2**63)
_INT64_MAX = 2**63 - 1


class ChatId:
    """
    Target chat: numeric identifier or ``@username`` of a channel/supergroup.

        ChatId(-100123)        -> identifier=-100123
        ChatId("-100123")      -> identifier=-100123
        ChatId("@channelname") -> username="@channelname"
    """

    __slots__ = ("identifier", "username")

    def __init__(self, value: int | str | ChatId):
        if value is None:
            raise TypeError("chat id must not be None")

        self.identifier: int | None = None
        self.username: str | None = None

        if isinstance(value, ChatId):
            self.identifier = value.identifier
            self.username = value.username
        elif isinstance(value, bool):
            raise TypeError("chat id must be int or str, not bool")
        elif isinstance(value, int):
            self.identifier = _check_range(value)
        elif isinstance(value, str):
            if _USERNAME_FORMAT.match(value):
                self.username = value
            elif _NUMERIC_FORMAT.match(value):
                self.identifier = _check_range(int(value))
            else:
                raise ValueError(f"Username value is incorrect: {value!r}")
        else:
            raise TypeError(f"chat id must be int or str, not {type(value).__name__}")

    @property
    def value(self) -> int | str:
        """Wire representation."""
        if self.username is not None:
            return self.username
        assert self.identifier is not None
        return self.identifier

    def __str__(self) -> str:
        return str(self.value)

    def __repr__(self) -> str:
        return f"ChatId({self.value!r})"

    def __eq__(self, other: object) -> bool:
        if isinstance(other, (int, str)) and not isinstance(other, bool):
            try:
                other = ChatId(other)
            except ValueError:
                return False
        if not isinstance(other, ChatId):
            return NotImplemented
        return self.identifier == other.identifier and self.username == other.username

    def __hash__(self) -> int:
        return hash(self.value)

    @classmethod
    def _validate(cls, value: Any) -> ChatId:
        if isinstance(value, ChatId):
            return value
        try:
            return cls(value)
        except TypeError as exc:
            raise ValueError(str(exc)) from exc

    @classmethod
    def __get_pydantic_core_schema__(cls, source: Any, handler: GetCoreSchemaHandler) -> core_schema.CoreSchema:
        return core_schema.no_info_plain_validator_function(
            cls._validate,
            serialization=core_schema.plain_serializer_function_ser_schema(lambda chat_id: chat_id.value),
        )


def _check_range(identifier: int) -> int:
    if not _INT64_MIN <= identifier <= _INT64_MAX:
        raise ValueError(f"Chat identifier is out of range: {identifier}")
    return identifier


class InputFile:
    """File content uploaded with a multipart request."""

    __slots__ = ("content", "filename", "mime_type")

    def __init__(self, content: bytes | BinaryIO, filename: str = "file", mime_type: str | None = None):
        self.content = content
        self.filename = filename
        self.mime_type = mime_type

    def as_httpx_file(self) -> tuple[Any, ...]:
        if self.mime_type:
            return (self.filename, self.content, self.mime_type)
        return (self.filename, self.content)


class TelegramObject(BaseModel):
    # Bot API adds fields often; unknown ones are kept, not rejected.
    model_config = ConfigDict(extra="allow", populate_by_name=True)


class User(TelegramObject):
    id: int
    is_bot: bool
    first_name: str
    last_name: str | None = None
    username: str | None = None
    language_code: str | None = None


class Chat(TelegramObject):
    id: int
    type: str
    title: str | None = None
    username: str | None = None
    first_name: str | None = None
    last_name: str | None = None


class Message(TelegramObject):
    message_id: int
    date: int
    chat: Chat
    from_user: User | None = Field(default=None, alias="from")
    message_thread_id: int | None = None
    text: str | None = None
    caption: str | None = None


class File(TelegramObject):
    file_id: str
    file_unique_id: str
    file_size: int | None = None
    file_path: str | None = None


class Update(TelegramObject):
    update_id: int
    message: Message | None = None
    edited_message: Message | None = None
    channel_post: Message | None = None


class WebhookInfo(TelegramObject):
    url: str
    has_custom_certificate: bool
    pending_update_count: int
    ip_address: str | None = None
    last_error_date: int | None = None
    last_error_message: str | None = None
    max_connections: int | None = None
    allowed_updates: list[str] | None = None
