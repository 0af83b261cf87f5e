from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from functools import lru_cache
from typing import Any

from pydantic import BaseModel, TypeAdapter, ValidationError

from jobbridge_client.classifier import body_message, body_text
from jobbridge_client.endpoints import DecodeStrategy, Endpoint
from jobbridge_client.errors import ApiError, ApiResult, ErrorOutcome
from jobbridge_client.models import CareerRecommendations

LOGGER = logging.getLogger("jobbridge.decoding")

_STRING_LIST = TypeAdapter(list[str])


@lru_cache(maxsize=None)
def _adapter(model: type[BaseModel], many: bool) -> TypeAdapter:
    return TypeAdapter(list[model] if many else model)


def decode_strict(body: bytes, model: type[BaseModel], *, many: bool = False) -> Any:
    try:
        return _adapter(model, many).validate_json(body)
    except ValidationError as exc:
        LOGGER.warning(
            json.dumps(
                {
                    "event": "decode_failed",
                    "model": model.__name__,
                    "errors": exc.error_count(),
                }
            )
        )
        raise ApiError(ErrorOutcome.decoding_failure()) from exc


def _matches_type(value: Any, expected: type) -> bool:
    if expected is int:
        return isinstance(value, int) and not isinstance(value, bool)
    return isinstance(value, expected)


def invalid_fields(item: Mapping[str, Any], required: Mapping[str, type]) -> list[str]:
    return [
        field
        for field, expected in required.items()
        if field not in item or not _matches_type(item[field], expected)
    ]


def decode_lenient(
    body: bytes,
    model: type[BaseModel],
    required: Mapping[str, type] | None = None,
) -> list[Any]:
    """Decode an untyped list of maps, dropping maps that fail validation.

    Only a payload that is not a list of maps fails the call; individual
    records missing or mistyping a required field are skipped.
    """
    try:
        payload = json.loads(body)
    except ValueError as exc:
        raise ApiError(ErrorOutcome.decoding_failure()) from exc
    if not isinstance(payload, list) or not all(isinstance(item, dict) for item in payload):
        raise ApiError(ErrorOutcome.decoding_failure())

    required_fields = required if required is not None else getattr(model, "LENIENT_FIELDS", {})
    records: list[Any] = []
    for index, item in enumerate(payload):
        bad_fields = invalid_fields(item, required_fields)
        if not bad_fields:
            try:
                records.append(model.model_validate(item))
                continue
            except ValidationError as exc:
                bad_fields = sorted({str(error["loc"][0]) for error in exc.errors() if error["loc"]})
        LOGGER.warning(
            json.dumps(
                {
                    "event": "record_dropped",
                    "model": model.__name__,
                    "index": index,
                    "invalid_fields": bad_fields,
                }
            )
        )
    return records


def decode_string_list_or_wrapped(body: bytes) -> CareerRecommendations:
    try:
        return CareerRecommendations(recommendations=_STRING_LIST.validate_json(body))
    except ValidationError:
        pass
    return decode_strict(body, CareerRecommendations)


def decode_applied_flag(body: bytes) -> bool:
    try:
        payload = json.loads(body)
    except ValueError as exc:
        raise ApiError(ErrorOutcome.decoding_failure()) from exc
    if not isinstance(payload, dict):
        return False
    applied = payload.get("applied")
    return applied if isinstance(applied, bool) else False


def decode_body(body: bytes, endpoint: Endpoint) -> Any:
    strategy = endpoint.strategy
    if strategy is DecodeStrategy.NONE:
        return None
    if strategy is DecodeStrategy.TEXT:
        return body_text(body) or endpoint.default_text or ""
    if strategy is DecodeStrategy.MESSAGE:
        return body_message(body) or body_text(body) or endpoint.default_text or ""

    if not body.strip():
        if endpoint.empty_body_is_empty_list:
            return []
        raise ApiError(ErrorOutcome.no_data())

    if strategy is DecodeStrategy.STRICT:
        return decode_strict(body, endpoint.model, many=endpoint.many)
    if strategy is DecodeStrategy.LENIENT:
        return decode_lenient(body, endpoint.model)
    if strategy is DecodeStrategy.STRING_LIST_OR_WRAPPED:
        return decode_string_list_or_wrapped(body)
    if strategy is DecodeStrategy.APPLIED_FLAG:
        return decode_applied_flag(body)
    raise ValueError(f"Unsupported decode strategy: {strategy}")


def decode_payload(body: bytes, endpoint: Endpoint) -> ApiResult[Any]:
    try:
        return ApiResult.success(decode_body(body, endpoint))
    except ApiError as exc:
        return ApiResult.failure(exc.outcome)
