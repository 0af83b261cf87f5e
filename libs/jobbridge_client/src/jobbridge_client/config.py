from __future__ import annotations

import os

import httpx
from pydantic import BaseModel, Field

from jobbridge_client.session import DEFAULT_SESSION_DB_PATH

DEFAULT_BASE_URL = "http://localhost:8080/api"


class ClientSettings(BaseModel):
    base_url: str = DEFAULT_BASE_URL
    session_db_path: str = DEFAULT_SESSION_DB_PATH
    timeout_seconds: float | None = Field(default=None, gt=0)
    connect_retries: int = Field(default=0, ge=0, le=5)

    @property
    def timeout(self) -> httpx.Timeout | None:
        """None means "use the transport default"."""
        if self.timeout_seconds is None:
            return None
        return httpx.Timeout(self.timeout_seconds)


def parse_timeout(raw: str) -> float | None:
    value = raw.strip()
    if not value:
        return None
    try:
        parsed = float(value)
    except ValueError as exc:
        raise ValueError("JOBBRIDGE_TIMEOUT_SECONDS must be a number of seconds.") from exc
    if parsed <= 0:
        raise ValueError("JOBBRIDGE_TIMEOUT_SECONDS must be positive.")
    return parsed


def parse_retries(raw: str) -> int:
    value = raw.strip()
    if not value:
        return 0
    try:
        parsed = int(value)
    except ValueError as exc:
        raise ValueError("JOBBRIDGE_CONNECT_RETRIES must be an integer.") from exc
    if parsed < 0:
        raise ValueError("JOBBRIDGE_CONNECT_RETRIES must not be negative.")
    return parsed


def resolve_settings(
    *,
    base_url: str | None = None,
    session_db_path: str | None = None,
    timeout_seconds: float | None = None,
    connect_retries: int | None = None,
) -> ClientSettings:
    """Explicit arguments win over JOBBRIDGE_* environment variables."""
    resolved_base_url = (base_url or os.getenv("JOBBRIDGE_BASE_URL", "")).strip() or DEFAULT_BASE_URL
    resolved_db_path = session_db_path or os.getenv("JOBBRIDGE_SESSION_DB_PATH", DEFAULT_SESSION_DB_PATH)
    resolved_timeout = (
        timeout_seconds
        if timeout_seconds is not None
        else parse_timeout(os.getenv("JOBBRIDGE_TIMEOUT_SECONDS", ""))
    )
    resolved_retries = (
        connect_retries
        if connect_retries is not None
        else parse_retries(os.getenv("JOBBRIDGE_CONNECT_RETRIES", ""))
    )
    return ClientSettings(
        base_url=resolved_base_url.rstrip("/"),
        session_db_path=resolved_db_path,
        timeout_seconds=resolved_timeout,
        connect_retries=resolved_retries,
    )
