from __future__ import annotations

import json

from jobbridge_client.endpoints import Endpoint
from jobbridge_client.errors import (
    FORBIDDEN_MESSAGE,
    NOT_FOUND_MESSAGE,
    SESSION_EXPIRED_MESSAGE,
    UNKNOWN_BODY_MESSAGE,
    ApiResult,
    ErrorOutcome,
)


def body_text(body: bytes) -> str:
    return body.decode("utf-8", errors="replace").strip()


def body_message(body: bytes) -> str | None:
    """Return the ``message`` field of a JSON object body, if there is one."""
    try:
        payload = json.loads(body)
    except ValueError:
        return None
    if not isinstance(payload, dict):
        return None
    message = payload.get("message")
    return message if isinstance(message, str) and message else None


def classify_response(
    status_code: int,
    body: bytes,
    endpoint: Endpoint | None = None,
) -> ApiResult[bytes]:
    """Map a completed exchange onto success bytes or one ErrorOutcome.

    Precedence is fixed: 401, 403, 404, 200, then every other status.
    """
    if status_code == 401:
        default = endpoint.unauthorized_message if endpoint else SESSION_EXPIRED_MESSAGE
        return ApiResult.failure(ErrorOutcome.unauthorized(body_message(body) or default))

    if status_code == 403:
        default = endpoint.forbidden_message if endpoint else FORBIDDEN_MESSAGE
        return ApiResult.failure(ErrorOutcome.forbidden(body_text(body) or default))

    if status_code == 404:
        message = (endpoint.not_found_message if endpoint else None) or NOT_FOUND_MESSAGE
        return ApiResult.failure(ErrorOutcome.server_error(message))

    if status_code == 200:
        return ApiResult.success(body)

    if status_code == 408 and endpoint is not None and endpoint.timeout_message:
        return ApiResult.failure(ErrorOutcome.server_error(endpoint.timeout_message))

    detail = body_text(body) or UNKNOWN_BODY_MESSAGE
    return ApiResult.failure(ErrorOutcome.server_error(f"{status_code}: {detail}"))
