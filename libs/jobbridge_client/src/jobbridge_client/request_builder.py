from __future__ import annotations

import uuid
from collections.abc import Mapping, Sequence
from typing import Any

import httpx

from jobbridge_client.errors import InvalidRequestError

QueryParams = Mapping[str, Any] | Sequence[tuple[str, Any]]


def build_headers(token: str | None, *, has_body: bool, request_id: str | None = None) -> dict[str, str]:
    headers = {"x-request-id": request_id or str(uuid.uuid4())}
    if has_body:
        headers["Content-Type"] = "application/json"
    if token:
        headers["Authorization"] = f"Bearer {token}"
    return headers


def build_url(base_url: str, path: str) -> httpx.URL:
    try:
        url = httpx.URL(f"{base_url.rstrip('/')}/{path.lstrip('/')}")
    except httpx.InvalidURL as exc:
        raise InvalidRequestError(f"Invalid request URL for path {path!r}") from exc
    if url.scheme not in ("http", "https") or not url.host:
        raise InvalidRequestError(f"Base URL must be an absolute http(s) URL: {base_url!r}")
    return url


def build_request(
    base_url: str,
    path: str,
    method: str,
    token: str | None = None,
    params: QueryParams | None = None,
    json_body: Any = None,
    *,
    request_id: str | None = None,
) -> httpx.Request:
    """Pure construction of an outbound request; nothing is sent."""
    url = build_url(base_url, path)
    if params:
        items = list(params.items()) if isinstance(params, Mapping) else list(params)
        url = url.copy_merge_params([(key, _param_value(value)) for key, value in items])
    return httpx.Request(
        method=method.upper(),
        url=url,
        headers=build_headers(token, has_body=json_body is not None, request_id=request_id),
        json=json_body,
    )


def _param_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)
