"""
Response envelope of the Telegram Bot API.

Every method answers with the same wrapper:
    {"ok": true, "result": ...}
    {"ok": false, "error_code": 400, "description": "...", "parameters": {...}}
"""

from __future__ import annotations

from typing import Any, Generic, TypeVar

from pydantic import BaseModel, ConfigDict

ResultT = TypeVar("ResultT")


class ResponseParameters(BaseModel):
    """Hints attached to some failures (flood control, chat migration)."""

    model_config = ConfigDict(extra="allow", frozen=True)

    migrate_to_chat_id: int | None = None
    retry_after: int | None = None


class ApiResponse(BaseModel, Generic[ResultT]):
    model_config = ConfigDict(frozen=True)

    ok: bool
    result: ResultT | None = None
    error_code: int | None = None
    description: str | None = None
    parameters: ResponseParameters | None = None


class SuccessfulApiResponse(BaseModel, Generic[ResultT]):
    model_config = ConfigDict(frozen=True)

    ok: bool
    result: ResultT


class FailedApiResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    ok: bool
    error_code: int
    description: str
    parameters: ResponseParameters | None = None


def decode_success(raw: str, result_type: Any) -> Any:
    """Return ``result`` of a success envelope (raises pydantic ``ValidationError``)."""
    envelope = SuccessfulApiResponse[result_type].model_validate_json(raw)
    return envelope.result


def decode_failure(raw: str) -> FailedApiResponse:
    return FailedApiResponse.model_validate_json(raw)


def decode_envelope(raw: str, result_type: Any) -> ApiResponse[Any]:
    return ApiResponse[result_type].model_validate_json(raw)
