from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Generic, TypeVar

from pydantic import BaseModel, ConfigDict, model_validator

T = TypeVar("T")

AUTH_REQUIRED_MESSAGE = "인증이 필요합니다. 로그인해주세요."
SESSION_EXPIRED_MESSAGE = "인증이 만료되었습니다. 다시 로그인해주세요."
FORBIDDEN_MESSAGE = "권한이 없습니다."
NOT_FOUND_MESSAGE = "요청한 리소스를 찾을 수 없습니다."
UNKNOWN_BODY_MESSAGE = "알 수 없는 오류"


class ErrorKind(str, Enum):
    INVALID_INPUT = "invalid_input"
    NO_DATA = "no_data"
    DECODING_FAILURE = "decoding_failure"
    UNAUTHORIZED = "unauthorized"
    FORBIDDEN = "forbidden"
    SERVER_ERROR = "server_error"
    UNKNOWN = "unknown"


PARAMETERIZED_KINDS = frozenset({ErrorKind.UNAUTHORIZED, ErrorKind.FORBIDDEN, ErrorKind.SERVER_ERROR})

_FIXED_MESSAGES = {
    ErrorKind.INVALID_INPUT: "유효하지 않은 요청입니다.",
    ErrorKind.NO_DATA: "데이터를 받아오지 못했습니다.",
    ErrorKind.DECODING_FAILURE: "데이터 형식에 문제가 있습니다.",
    ErrorKind.UNKNOWN: "알 수 없는 오류가 발생했습니다.",
}


class ErrorOutcome(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: ErrorKind
    message: str | None = None

    @model_validator(mode="after")
    def validate_message(self) -> ErrorOutcome:
        if self.kind in PARAMETERIZED_KINDS and not self.message:
            raise ValueError(f"{self.kind.value} outcomes require a message.")
        return self

    @classmethod
    def invalid_input(cls, message: str | None = None) -> ErrorOutcome:
        return cls(kind=ErrorKind.INVALID_INPUT, message=message)

    @classmethod
    def no_data(cls) -> ErrorOutcome:
        return cls(kind=ErrorKind.NO_DATA)

    @classmethod
    def decoding_failure(cls) -> ErrorOutcome:
        return cls(kind=ErrorKind.DECODING_FAILURE)

    @classmethod
    def unauthorized(cls, message: str) -> ErrorOutcome:
        return cls(kind=ErrorKind.UNAUTHORIZED, message=message)

    @classmethod
    def forbidden(cls, message: str) -> ErrorOutcome:
        return cls(kind=ErrorKind.FORBIDDEN, message=message)

    @classmethod
    def server_error(cls, message: str) -> ErrorOutcome:
        return cls(kind=ErrorKind.SERVER_ERROR, message=message)

    @classmethod
    def unknown(cls) -> ErrorOutcome:
        return cls(kind=ErrorKind.UNKNOWN)

    @property
    def user_message(self) -> str:
        """Text shown to the user for this outcome."""
        if self.kind is ErrorKind.SERVER_ERROR:
            return f"서버 오류: {self.message}"
        if self.message:
            return self.message
        return _FIXED_MESSAGES.get(self.kind, _FIXED_MESSAGES[ErrorKind.UNKNOWN])

    @property
    def requires_login(self) -> bool:
        return self.kind is ErrorKind.UNAUTHORIZED


class ApiError(Exception):
    def __init__(self, outcome: ErrorOutcome) -> None:
        super().__init__(outcome.user_message)
        self.outcome = outcome


class InvalidRequestError(ValueError):
    pass


@dataclass(frozen=True)
class ApiResult(Generic[T]):
    """Either a decoded value or exactly one ErrorOutcome."""

    value: T | None = None
    error: ErrorOutcome | None = None

    @classmethod
    def success(cls, value: T) -> ApiResult[T]:
        return cls(value=value)

    @classmethod
    def failure(cls, error: ErrorOutcome) -> ApiResult[T]:
        return cls(error=error)

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> T:
        if self.error is not None:
            raise ApiError(self.error)
        return self.value  # type: ignore[return-value]

    def value_or(self, default: T) -> T:
        if self.error is not None:
            return default
        return self.value  # type: ignore[return-value]
