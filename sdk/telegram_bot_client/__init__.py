"""
telegram-bot-client: asyncio client for the Telegram Bot API.

Usage:
    from telegram_bot_client import TelegramBotClient

    async with TelegramBotClient("123456:ABC-DEF") as bot:
        message = await bot.send_message(chat_id=123, text="Hello!")
"""

from .classifier import DefaultErrorClassifier, ErrorClassifier, FailureContext
from .client import TelegramBotClient
from .config import BotClientSettings, get_settings
from .envelope import ApiResponse, ResponseParameters
from .events import ApiRequestEvent, ApiResponseEvent
from .exceptions import ErrorKind, TelegramAPIError, TelegramRequestError
from .types import ChatId, InputFile

__all__ = [
    "TelegramBotClient",
    "BotClientSettings",
    "get_settings",
    "ApiResponse",
    "ResponseParameters",
    "ApiRequestEvent",
    "ApiResponseEvent",
    "ErrorClassifier",
    "DefaultErrorClassifier",
    "FailureContext",
    "ErrorKind",
    "TelegramRequestError",
    "TelegramAPIError",
    "ChatId",
    "InputFile",
]
