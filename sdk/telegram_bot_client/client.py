"""
HTTP client for the Telegram Bot API.

Features:
- Typed request descriptors in, typed results out
- Failures turned into classified errors by a pluggable ErrorClassifier
- Request/response observers awaited around every call
- File downloads, read straight from disk when a self-hosted Bot API server
  shares its file storage with this process

No retries, backoff or rate limiting: every failure surfaces to the caller.
"""

from __future__ import annotations

import asyncio
import logging
import re
import shutil
import time
from pathlib import Path
from typing import Any, BinaryIO, TypeVar

import httpx
from pydantic import ValidationError

from .classifier import DefaultErrorClassifier, ErrorClassifier, FailureContext, Scope
from .config import DEFAULT_API_BASE, BotClientSettings
from .envelope import ApiResponse, FailedApiResponse, decode_envelope, decode_failure, decode_success
from .events import ApiRequestEvent, ApiResponseEvent, RequestObserver, ResponseObserver
from .exceptions import ErrorKind, TelegramRequestError
from .requests import (
    BotRequest,
    CloseRequest,
    DeleteMessageRequest,
    DeleteWebhookRequest,
    ForwardMessageRequest,
    GetChatRequest,
    GetFileRequest,
    GetMeRequest,
    GetUpdatesRequest,
    GetWebhookInfoRequest,
    LogOutRequest,
    SendDocumentRequest,
    SendMessageRequest,
    SendPhotoRequest,
    SetWebhookRequest,
)
from .types import Chat, ChatId, File, InputFile, Message, Update, User, WebhookInfo

logger = logging.getLogger(__name__)

ResultT = TypeVar("ResultT")

_TELEGRAM_HOST = "api.telegram.org"

# 16 digits is the longest value that fits into 52 bits.
_TOKEN_FORMAT = re.compile(r"^(?P<token>-?[0-9]{1,16}):.*$")


def _token_hint(token: str | None) -> str:
    if not token:
        return "unknown"
    suffix = token[-6:] if len(token) >= 6 else token
    return f"*{suffix}"


def _parse_bot_id(token: str) -> int | None:
    match = _TOKEN_FORMAT.match(token)
    if match is None:
        return None
    return int(match.group("token"))


def _resolve_base_url(base_url: str) -> tuple[str, bool]:
    """Return ``(scheme://authority, is_local_bot_server)``; path, query and fragment are dropped."""
    invalid = 'Invalid format. A valid base url looks "http://localhost:8081"'
    try:
        url = httpx.URL(base_url)
    except httpx.InvalidURL as exc:
        raise ValueError(invalid) from exc
    if not url.scheme or not url.host:
        raise ValueError(invalid)

    authority = url.netloc.decode("ascii")
    return f"{url.scheme}://{authority}", url.host != _TELEGRAM_HOST


def _cancellation_requested() -> bool:
    task = asyncio.current_task()
    return task is not None and task.cancelling() > 0


def _copy_local_file(path: Path, destination: BinaryIO) -> None:
    with path.open("rb") as source:
        shutil.copyfileobj(source, destination)


class TelegramBotClient:
    """
    Client for the Telegram Bot API.

    Example:
        async with TelegramBotClient("123456:ABC-DEF") as bot:
            me = await bot.get_me()
            await bot.send_message(chat_id="@channelname", text="Hello!")

    ``http_client`` is the transport; pass your own ``httpx.AsyncClient`` to
    control proxies, pooling or TLS. A client passed in is not closed by
    ``close()``.
    """

    def __init__(
        self,
        token: str,
        http_client: httpx.AsyncClient | None = None,
        base_url: str | None = None,
        *,
        timeout: float = 30.0,
        error_classifier: ErrorClassifier | None = None,
    ):
        if token is None:
            raise TypeError("token must not be None")

        self.bot_id = _parse_bot_id(token)
        effective_base_url, self.local_bot_server = _resolve_base_url(base_url or DEFAULT_API_BASE)
        self.base_request_url = f"{effective_base_url}/bot{token}"
        self.base_file_url = f"{effective_base_url}/file/bot{token}"
        self._token_hint = _token_hint(token)

        self._owns_client = http_client is None
        self._client = http_client if http_client is not None else httpx.AsyncClient()
        self.timeout = timeout
        self.error_classifier = error_classifier or DefaultErrorClassifier()

        self._request_observers: list[RequestObserver] = []
        self._response_observers: list[ResponseObserver] = []

    @classmethod
    def from_settings(
        cls,
        settings: BotClientSettings,
        http_client: httpx.AsyncClient | None = None,
    ) -> TelegramBotClient:
        return cls(
            settings.bot_token,
            http_client,
            settings.api_base,
            timeout=settings.timeout,
        )

    async def close(self) -> None:
        """Close the HTTP client if it was created by this instance."""
        if self._owns_client and not self._client.is_closed:
            await self._client.aclose()

    async def __aenter__(self) -> TelegramBotClient:
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.close()

    # --- Configuration ---

    @property
    def timeout(self) -> float:
        """Network timeout in seconds, applied to every call separately."""
        return self._timeout

    @timeout.setter
    def timeout(self, value: float) -> None:
        if value <= 0:
            raise ValueError("timeout must be positive")
        self._timeout = float(value)

    @property
    def error_classifier(self) -> ErrorClassifier:
        return self._error_classifier

    @error_classifier.setter
    def error_classifier(self, value: ErrorClassifier) -> None:
        if value is None:
            raise ValueError("error_classifier must not be None")
        self._error_classifier = value

    def add_request_observer(self, observer: RequestObserver) -> None:
        """Await ``observer(ApiRequestEvent)`` before each request is sent."""
        self._request_observers.append(observer)

    def add_response_observer(self, observer: ResponseObserver) -> None:
        """Await ``observer(ApiResponseEvent)`` after each response is received."""
        self._response_observers.append(observer)

    # --- Dispatch ---

    async def dispatch(self, request: BotRequest[ResultT]) -> ResultT:
        """Call the method described by ``request`` and return its ``result``."""
        response = await self._exchange(request)
        raw = response.text

        if response.status_code != httpx.codes.OK:
            raise self._classify_failure(response.status_code, raw, scope="request")

        try:
            return decode_success(raw, request.result_type)
        except ValidationError as exc:
            raise TelegramRequestError(
                "Required properties not found in response",
                kind=ErrorKind.DECODE,
                status_code=response.status_code,
                body=raw,
                inner=exc,
            ) from exc

    async def dispatch_raw(self, request: BotRequest[ResultT]) -> ApiResponse[ResultT]:
        """Like ``dispatch`` but return the envelope, even when ``ok`` is false."""
        response = await self._exchange(request)
        raw = response.text
        try:
            return decode_envelope(raw, request.result_type)
        except ValidationError as exc:
            raise TelegramRequestError(
                "Required properties not found in response",
                kind=ErrorKind.DECODE,
                status_code=response.status_code,
                body=raw,
                inner=exc,
            ) from exc

    async def test_api(self) -> bool:
        """Return False if the token is rejected (401), True if ``getMe`` succeeds."""
        try:
            await self.dispatch(GetMeRequest())
        except TelegramRequestError as exc:
            if exc.kind is ErrorKind.PROTOCOL and exc.error_code == 401:
                return False
            raise
        return True

    async def _exchange(self, request: BotRequest[Any]) -> httpx.Response:
        url = f"{self.base_request_url}/{request.method_name}"
        http_request = self._client.build_request(
            request.http_method,
            url,
            timeout=self._timeout,
            **request.build_content(),
        )

        # Registrations made while this call is in flight apply to later calls only.
        request_observers = tuple(self._request_observers)
        response_observers = tuple(self._response_observers)

        request_event = ApiRequestEvent(method_name=request.method_name, http_request=http_request)
        for observer in request_observers:
            await observer(request_event)

        logger.info("telegram.call method=%s bot=%s", request.method_name, self._token_hint)
        started = time.perf_counter()
        response = await self._send(http_request, scope="request")
        logger.info(
            "telegram.result method=%s http=%s ms=%s bot=%s",
            request.method_name,
            response.status_code,
            int((time.perf_counter() - started) * 1000),
            self._token_hint,
        )

        if response_observers:
            response_event = ApiResponseEvent(request_event=request_event, http_response=response)
            for observer in response_observers:
                await observer(response_event)

        return response

    async def _send(self, http_request: httpx.Request, *, scope: Scope, stream: bool = False) -> httpx.Response:
        try:
            return await self._client.send(http_request, stream=stream)
        except asyncio.CancelledError as exc:
            if _cancellation_requested():
                raise
            logger.warning("telegram.transport_error scope=%s error=%r", scope, exc)
            raise self._error_classifier.classify(FailureContext(scope=scope, transport_error=exc)) from exc
        except Exception as exc:
            logger.warning("telegram.transport_error scope=%s error=%r", scope, exc)
            raise self._error_classifier.classify(FailureContext(scope=scope, transport_error=exc)) from exc

    def _classify_failure(self, status_code: int, raw: str | None, *, scope: Scope) -> TelegramRequestError:
        envelope: FailedApiResponse | None = None
        decode_error: ValidationError | None = None
        if raw:
            try:
                envelope = decode_failure(raw)
            except ValidationError as exc:
                decode_error = exc

        return self._error_classifier.classify(
            FailureContext(
                scope=scope,
                status_code=status_code,
                body=raw or None,
                envelope=envelope,
                decode_error=decode_error,
            )
        )

    # --- Files ---

    async def download_file(self, file_path: str, destination: BinaryIO) -> None:
        """
        Write the content of ``file_path`` (as returned by ``getFile``) to ``destination``.

        With a self-hosted Bot API server (``--local`` mode) ``file_path`` is an
        absolute path on the server's disk; when that path is visible to this
        process the file is copied directly and no HTTP request is made.
        """
        if file_path is None or len(file_path) < 2:
            raise ValueError("Invalid file path")
        if destination is None:
            raise TypeError("destination must not be None")

        local_path = Path(file_path)
        if self.local_bot_server and local_path.is_file():
            logger.info("telegram.download path=%s local=%s", file_path, True)
            await asyncio.to_thread(_copy_local_file, local_path, destination)
            return

        logger.info("telegram.download path=%s local=%s", file_path, False)
        http_request = self._client.build_request(
            "GET",
            f"{self.base_file_url}/{file_path}",
            timeout=self._timeout,
        )
        # Headers only: the body is streamed into destination.
        response = await self._send(http_request, scope="file download", stream=True)
        try:
            if not response.is_success:
                raise await self._classify_download_failure(response)
            await self._copy_content(response, destination)
        finally:
            await response.aclose()

    async def get_info_and_download_file(self, file_id: str, destination: BinaryIO) -> File:
        """Resolve ``file_id`` with ``getFile``, download it and return the file info."""
        file = await self.dispatch(GetFileRequest(file_id=file_id))
        await self.download_file(file.file_path, destination)
        return file

    async def _classify_download_failure(self, response: httpx.Response) -> TelegramRequestError:
        envelope: FailedApiResponse | None = None
        decode_error: BaseException | None = None
        try:
            await response.aread()
            envelope = decode_failure(response.text)
        except (httpx.HTTPError, ValidationError) as exc:
            decode_error = exc

        return self._error_classifier.classify(
            FailureContext(
                scope="file download",
                status_code=response.status_code,
                envelope=envelope,
                decode_error=decode_error,
            )
        )

    @staticmethod
    async def _copy_content(response: httpx.Response, destination: BinaryIO) -> None:
        no_content = TelegramRequestError(
            "Response doesn't contain any content",
            kind=ErrorKind.PROTOCOL,
            status_code=response.status_code,
        )
        if response.headers.get("content-length") == "0":
            raise no_content

        received = 0
        try:
            async for chunk in response.aiter_bytes():
                destination.write(chunk)
                received += len(chunk)
        except Exception as exc:
            raise TelegramRequestError(
                "Exception during file download",
                kind=ErrorKind.PROTOCOL,
                status_code=response.status_code,
                inner=exc,
            ) from exc

        if received == 0:
            raise no_content

    # === Getting updates ===

    async def get_updates(
        self,
        *,
        offset: int | None = None,
        limit: int | None = None,
        timeout: int | None = None,
        allowed_updates: list[str] | None = None,
    ) -> list[Update]:
        return await self.dispatch(
            GetUpdatesRequest(offset=offset, limit=limit, timeout=timeout, allowed_updates=allowed_updates)
        )

    async def set_webhook(
        self,
        url: str,
        *,
        certificate: InputFile | None = None,
        ip_address: str | None = None,
        max_connections: int | None = None,
        allowed_updates: list[str] | None = None,
        drop_pending_updates: bool | None = None,
        secret_token: str | None = None,
    ) -> bool:
        return await self.dispatch(
            SetWebhookRequest(
                url=url,
                certificate=certificate,
                ip_address=ip_address,
                max_connections=max_connections,
                allowed_updates=allowed_updates,
                drop_pending_updates=drop_pending_updates,
                secret_token=secret_token,
            )
        )

    async def delete_webhook(self, *, drop_pending_updates: bool | None = None) -> bool:
        return await self.dispatch(DeleteWebhookRequest(drop_pending_updates=drop_pending_updates))

    async def get_webhook_info(self) -> WebhookInfo:
        return await self.dispatch(GetWebhookInfoRequest())

    # === Available methods ===

    async def get_me(self) -> User:
        return await self.dispatch(GetMeRequest())

    async def log_out(self) -> bool:
        """Log out from the cloud Bot API server before moving the bot to a local one."""
        return await self.dispatch(LogOutRequest())

    async def close_bot(self) -> bool:
        """Bot API ``close``: shut the bot instance down before moving it between local servers."""
        return await self.dispatch(CloseRequest())

    async def send_message(
        self,
        chat_id: ChatId | int | str,
        text: str,
        *,
        message_thread_id: int | None = None,
        parse_mode: str | None = None,
        entities: list[dict[str, Any]] | None = None,
        disable_web_page_preview: bool | None = None,
        disable_notification: bool | None = None,
        protect_content: bool | None = None,
        reply_to_message_id: int | None = None,
        allow_sending_without_reply: bool | None = None,
        reply_markup: dict[str, Any] | None = None,
    ) -> Message:
        return await self.dispatch(
            SendMessageRequest(
                chat_id=chat_id,
                text=text,
                message_thread_id=message_thread_id,
                parse_mode=parse_mode,
                entities=entities,
                disable_web_page_preview=disable_web_page_preview,
                disable_notification=disable_notification,
                protect_content=protect_content,
                reply_to_message_id=reply_to_message_id,
                allow_sending_without_reply=allow_sending_without_reply,
                reply_markup=reply_markup,
            )
        )

    async def forward_message(
        self,
        chat_id: ChatId | int | str,
        from_chat_id: ChatId | int | str,
        message_id: int,
        *,
        message_thread_id: int | None = None,
        disable_notification: bool | None = None,
        protect_content: bool | None = None,
    ) -> Message:
        return await self.dispatch(
            ForwardMessageRequest(
                chat_id=chat_id,
                from_chat_id=from_chat_id,
                message_id=message_id,
                message_thread_id=message_thread_id,
                disable_notification=disable_notification,
                protect_content=protect_content,
            )
        )

    async def delete_message(self, chat_id: ChatId | int | str, message_id: int) -> bool:
        return await self.dispatch(DeleteMessageRequest(chat_id=chat_id, message_id=message_id))

    async def send_photo(
        self,
        chat_id: ChatId | int | str,
        photo: InputFile | str,
        *,
        message_thread_id: int | None = None,
        caption: str | None = None,
        parse_mode: str | None = None,
        disable_notification: bool | None = None,
        reply_to_message_id: int | None = None,
        reply_markup: dict[str, Any] | None = None,
    ) -> Message:
        """
        Send a photo.

        photo: file_id or URL (str) is sent as JSON, an ``InputFile`` is uploaded
        with multipart/form-data.
        """
        return await self.dispatch(
            SendPhotoRequest(
                chat_id=chat_id,
                photo=photo,
                message_thread_id=message_thread_id,
                caption=caption,
                parse_mode=parse_mode,
                disable_notification=disable_notification,
                reply_to_message_id=reply_to_message_id,
                reply_markup=reply_markup,
            )
        )

    async def send_document(
        self,
        chat_id: ChatId | int | str,
        document: InputFile | str,
        *,
        thumbnail: InputFile | str | None = None,
        message_thread_id: int | None = None,
        caption: str | None = None,
        parse_mode: str | None = None,
        disable_content_type_detection: bool | None = None,
        disable_notification: bool | None = None,
        reply_to_message_id: int | None = None,
        reply_markup: dict[str, Any] | None = None,
    ) -> Message:
        return await self.dispatch(
            SendDocumentRequest(
                chat_id=chat_id,
                document=document,
                thumbnail=thumbnail,
                message_thread_id=message_thread_id,
                caption=caption,
                parse_mode=parse_mode,
                disable_content_type_detection=disable_content_type_detection,
                disable_notification=disable_notification,
                reply_to_message_id=reply_to_message_id,
                reply_markup=reply_markup,
            )
        )

    async def get_chat(self, chat_id: ChatId | int | str) -> Chat:
        return await self.dispatch(GetChatRequest(chat_id=chat_id))

    async def get_file(self, file_id: str) -> File:
        """getFile: file info with ``file_path`` for ``download_file``."""
        return await self.dispatch(GetFileRequest(file_id=file_id))
