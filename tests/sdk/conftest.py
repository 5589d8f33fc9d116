from __future__ import annotations

from typing import Any, Callable

import httpx
import pytest

from telegram_bot_client import TelegramBotClient

TOKEN = "1234567:4TT8bAc8GHUspu3ERYn-KGcvsvGB9u_n4ddy"


@pytest.fixture
def token() -> str:
    return TOKEN


@pytest.fixture
def make_bot() -> Callable[..., TelegramBotClient]:
    """Build a client whose transport is ``httpx.MockTransport(handler)``."""

    def _make(handler: Callable[[httpx.Request], Any], **kwargs: Any) -> TelegramBotClient:
        http_client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        return TelegramBotClient(TOKEN, http_client, **kwargs)

    return _make
