"""
Request descriptors.

A descriptor is an immutable value naming a Bot API method and carrying its
arguments. The client turns it into an HTTP request:
    - no arguments       -> empty body
    - plain arguments    -> JSON body
    - any ``InputFile``  -> multipart/form-data (non-file values form-encoded)
"""

from __future__ import annotations

import json
from typing import Any, ClassVar, Generic, TypeVar

from pydantic import BaseModel, ConfigDict

from .types import Chat, ChatId, File, InputFile, Message, Update, User, WebhookInfo

ResultT = TypeVar("ResultT")


def _form_value(value: Any) -> str:
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return str(value)
    return json.dumps(value, ensure_ascii=False)


class BotRequest(BaseModel, Generic[ResultT]):
    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    method_name: ClassVar[str]
    http_method: ClassVar[str] = "POST"
    result_type: ClassVar[Any] = Any

    def payload(self) -> dict[str, Any]:
        return self.model_dump(exclude_none=True, by_alias=True)

    def build_content(self) -> dict[str, Any]:
        """Keyword arguments for ``httpx.AsyncClient.build_request``."""
        payload = self.payload()
        if not payload:
            return {}

        files = {
            name: value.as_httpx_file()
            for name, value in payload.items()
            if isinstance(value, InputFile)
        }
        if not files:
            return {"json": payload}

        data = {name: _form_value(value) for name, value in payload.items() if name not in files}
        return {"data": data, "files": files}


# --- Getting updates ---


class GetUpdatesRequest(BotRequest[list[Update]]):
    method_name = "getUpdates"
    result_type = list[Update]

    offset: int | None = None
    limit: int | None = None
    timeout: int | None = None
    allowed_updates: list[str] | None = None


class SetWebhookRequest(BotRequest[bool]):
    method_name = "setWebhook"
    result_type = bool

    url: str
    certificate: InputFile | None = None
    ip_address: str | None = None
    max_connections: int | None = None
    allowed_updates: list[str] | None = None
    drop_pending_updates: bool | None = None
    secret_token: str | None = None


class DeleteWebhookRequest(BotRequest[bool]):
    method_name = "deleteWebhook"
    result_type = bool

    drop_pending_updates: bool | None = None


class GetWebhookInfoRequest(BotRequest[WebhookInfo]):
    method_name = "getWebhookInfo"
    result_type = WebhookInfo


# --- Available methods ---


class GetMeRequest(BotRequest[User]):
    method_name = "getMe"
    result_type = User


class LogOutRequest(BotRequest[bool]):
    method_name = "logOut"
    result_type = bool


class CloseRequest(BotRequest[bool]):
    method_name = "close"
    result_type = bool


class SendMessageRequest(BotRequest[Message]):
    method_name = "sendMessage"
    result_type = Message

    chat_id: ChatId
    text: str
    message_thread_id: int | None = None
    parse_mode: str | None = None
    entities: list[dict[str, Any]] | None = None
    disable_web_page_preview: bool | None = None
    disable_notification: bool | None = None
    protect_content: bool | None = None
    reply_to_message_id: int | None = None
    allow_sending_without_reply: bool | None = None
    reply_markup: dict[str, Any] | None = None


class ForwardMessageRequest(BotRequest[Message]):
    method_name = "forwardMessage"
    result_type = Message

    chat_id: ChatId
    from_chat_id: ChatId
    message_id: int
    message_thread_id: int | None = None
    disable_notification: bool | None = None
    protect_content: bool | None = None


class DeleteMessageRequest(BotRequest[bool]):
    method_name = "deleteMessage"
    result_type = bool

    chat_id: ChatId
    message_id: int


class SendPhotoRequest(BotRequest[Message]):
    """``photo`` is a file_id/URL string or an ``InputFile`` to upload."""

    method_name = "sendPhoto"
    result_type = Message

    chat_id: ChatId
    photo: InputFile | str
    message_thread_id: int | None = None
    caption: str | None = None
    parse_mode: str | None = None
    disable_notification: bool | None = None
    reply_to_message_id: int | None = None
    reply_markup: dict[str, Any] | None = None


class SendDocumentRequest(BotRequest[Message]):
    method_name = "sendDocument"
    result_type = Message

    chat_id: ChatId
    document: InputFile | str
    thumbnail: InputFile | str | None = None
    message_thread_id: int | None = None
    caption: str | None = None
    parse_mode: str | None = None
    disable_content_type_detection: bool | None = None
    disable_notification: bool | None = None
    reply_to_message_id: int | None = None
    reply_markup: dict[str, Any] | None = None


class GetChatRequest(BotRequest[Chat]):
    method_name = "getChat"
    result_type = Chat

    chat_id: ChatId


class GetFileRequest(BotRequest[File]):
    method_name = "getFile"
    result_type = File

    file_id: str
