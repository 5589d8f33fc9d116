from __future__ import annotations

import json

import httpx
import pytest

from telegram_bot_client import (
    BotClientSettings,
    DefaultErrorClassifier,
    ErrorKind,
    FailureContext,
    InputFile,
    TelegramAPIError,
    TelegramBotClient,
    TelegramRequestError,
)
from telegram_bot_client.envelope import FailedApiResponse


@pytest.mark.parametrize(
    ("bot_token", "expected"),
    [
        ("1234567:4TT8bAc8GHUspu3ERYn-KGcvsvGB9u_n4ddy", 1234567),
        ("-42:whatever", -42),
        ("9007199254740991:max", 9007199254740991),
        ("12345678901234567:too-long", None),
        ("bot:token", None),
        ("1234567", None),
    ],
)
def test_bot_id_from_token(bot_token: str, expected: int | None) -> None:
    assert TelegramBotClient(bot_token).bot_id == expected


def test_token_is_required() -> None:
    with pytest.raises(TypeError):
        TelegramBotClient(None)  # type: ignore[arg-type]


def test_default_base_url(token) -> None:
    bot = TelegramBotClient(token)

    assert bot.base_request_url == f"https://api.telegram.org/bot{token}"
    assert bot.base_file_url == f"https://api.telegram.org/file/bot{token}"
    assert bot.local_bot_server is False


def test_custom_base_url_switches_to_local_server(token) -> None:
    bot = TelegramBotClient(token, base_url="http://localhost:8081/some/path?query=1#fragment")

    assert bot.base_request_url == f"http://localhost:8081/bot{token}"
    assert bot.base_file_url == f"http://localhost:8081/file/bot{token}"
    assert bot.local_bot_server is True


def test_official_base_url_with_path_stays_remote(token) -> None:
    bot = TelegramBotClient(token, base_url="https://api.telegram.org/ignored")

    assert bot.base_request_url == f"https://api.telegram.org/bot{token}"
    assert bot.local_bot_server is False


@pytest.mark.parametrize("base_url", ["localhost", "not a url", "/relative/path"])
def test_invalid_base_url(token, base_url: str) -> None:
    with pytest.raises(ValueError, match="Invalid format"):
        TelegramBotClient(token, base_url=base_url)


def test_timeout_must_be_positive(token) -> None:
    bot = TelegramBotClient(token, timeout=5)
    assert bot.timeout == 5.0

    with pytest.raises(ValueError):
        bot.timeout = 0


def test_error_classifier_cannot_be_unset(token) -> None:
    bot = TelegramBotClient(token)
    with pytest.raises(ValueError):
        bot.error_classifier = None  # type: ignore[assignment]


def test_from_settings() -> None:
    settings = BotClientSettings(bot_token="42:secret", api_base="http://127.0.0.1:8081", timeout=10)
    bot = TelegramBotClient.from_settings(settings)

    assert bot.bot_id == 42
    assert bot.local_bot_server is True
    assert bot.timeout == 10.0
    assert bot.base_request_url == "http://127.0.0.1:8081/bot42:secret"


def test_settings_read_environment(monkeypatch) -> None:
    monkeypatch.setenv("TELEGRAM_BOT_TOKEN", "77:env-token")
    monkeypatch.setenv("TELEGRAM_TIMEOUT", "12.5")
    monkeypatch.delenv("TELEGRAM_API_BASE", raising=False)

    settings = BotClientSettings(_env_file=None)

    assert settings.bot_token == "77:env-token"
    assert settings.timeout == 12.5
    assert settings.api_base == "https://api.telegram.org"


@pytest.mark.asyncio
async def test_timeout_is_applied_per_request(make_bot) -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"ok": True, "result": True})

    bot = make_bot(handler, timeout=7)
    await bot.log_out()
    bot.timeout = 3
    await bot.close_bot()

    assert seen[0].extensions["timeout"]["read"] == 7.0
    assert seen[1].extensions["timeout"]["read"] == 3.0
    assert seen[1].url.path.endswith("/close")


@pytest.mark.asyncio
async def test_close_keeps_external_client_open(token) -> None:
    http_client = httpx.AsyncClient()
    async with TelegramBotClient(token, http_client):
        pass
    assert http_client.is_closed is False
    await http_client.aclose()

    bot = TelegramBotClient(token)
    await bot.close()
    assert bot._client.is_closed is True


@pytest.mark.asyncio
async def test_json_body(make_bot) -> None:
    bodies: list[dict] = []

    def handler(request: httpx.Request) -> httpx.Response:
        assert request.headers["content-type"] == "application/json"
        bodies.append(json.loads(request.content))
        return httpx.Response(
            200,
            json={
                "ok": True,
                "result": {
                    "message_id": 5,
                    "date": 1700000000,
                    "chat": {"id": -1001, "type": "channel", "title": "News"},
                    "text": "hi",
                },
            },
        )

    message = await make_bot(handler).send_message("@channelname", "hi", disable_notification=True)

    assert bodies == [{"chat_id": "@channelname", "text": "hi", "disable_notification": True}]
    assert message.message_id == 5
    assert message.chat.title == "News"


@pytest.mark.asyncio
async def test_multipart_body(make_bot) -> None:
    captured: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        request.read()
        captured.append(request)
        return httpx.Response(
            200,
            json={"ok": True, "result": {"message_id": 6, "date": 1700000000, "chat": {"id": 10, "type": "private"}}},
        )

    document = InputFile(b"col1,col2\n1,2\n", filename="report.csv", mime_type="text/csv")
    await make_bot(handler).send_document(
        10,
        document,
        caption="Weekly report",
        reply_markup={"inline_keyboard": [[{"text": "Open", "url": "https://example.com"}]]},
    )

    request = captured[0]
    body = request.content
    assert request.headers["content-type"].startswith("multipart/form-data; boundary=")
    assert b'name="document"; filename="report.csv"' in body
    assert b"col1,col2" in body
    assert b"Weekly report" in body
    assert b'{"inline_keyboard": [[{"text": "Open", "url": "https://example.com"}]]}' in body


@pytest.mark.asyncio
async def test_custom_classifier_replaces_default(make_bot) -> None:
    class FloodControl(TelegramAPIError):
        pass

    class FloodAwareClassifier:
        def __init__(self) -> None:
            self._default = DefaultErrorClassifier()

        def classify(self, context: FailureContext) -> TelegramRequestError:
            envelope = context.envelope
            if envelope is not None and envelope.error_code == 429:
                return FloodControl(
                    envelope.description,
                    envelope.error_code,
                    status_code=context.status_code,
                    parameters=envelope.parameters,
                )
            return self._default.classify(context)

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(
            429,
            json={"ok": False, "error_code": 429, "description": "Too Many Requests", "parameters": {"retry_after": 3}},
        )

    with pytest.raises(FloodControl) as exc_info:
        await make_bot(handler, error_classifier=FloodAwareClassifier()).get_me()
    assert exc_info.value.retry_after == 3


def test_classifier_prefers_transport_error() -> None:
    envelope = FailedApiResponse(ok=False, error_code=400, description="Bad Request")
    error = DefaultErrorClassifier().classify(
        FailureContext(
            scope="request",
            status_code=400,
            envelope=envelope,
            transport_error=ConnectionResetError("reset"),
        )
    )

    assert error.kind is ErrorKind.TRANSPORT
    assert error.message == "Exception during making request"
    assert error.status_code is None


def test_classifier_generic_protocol_error() -> None:
    error = DefaultErrorClassifier().classify(FailureContext(scope="request", status_code=502, body="Bad Gateway"))

    assert type(error) is TelegramRequestError
    assert error.kind is ErrorKind.PROTOCOL
    assert error.status_code == 502
    assert error.body == "Bad Gateway"
