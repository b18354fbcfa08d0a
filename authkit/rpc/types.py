"""Error model shared with the generated RPC stubs."""

from collections.abc import Callable
from enum import StrEnum
from typing import TypeVar

from pydantic import BaseModel, Field

RequestT = TypeVar("RequestT")
ResponseT = TypeVar("ResponseT")

RPCCall = Callable[[RequestT, dict[str, str]], ResponseT]


class Code(StrEnum):
    """RPC status codes."""

    CANCELED = "canceled"
    UNKNOWN = "unknown"
    INVALID_ARGUMENT = "invalid_argument"
    DEADLINE_EXCEEDED = "deadline_exceeded"
    NOT_FOUND = "not_found"
    ALREADY_EXISTS = "already_exists"
    PERMISSION_DENIED = "permission_denied"
    RESOURCE_EXHAUSTED = "resource_exhausted"
    FAILED_PRECONDITION = "failed_precondition"
    ABORTED = "aborted"
    OUT_OF_RANGE = "out_of_range"
    UNIMPLEMENTED = "unimplemented"
    INTERNAL = "internal"
    UNAVAILABLE = "unavailable"
    DATA_LOSS = "data_loss"
    UNAUTHENTICATED = "unauthenticated"


class FieldViolation(BaseModel):
    """One rejected request field."""

    field: str
    description: str


class ValidationErrorInfo(BaseModel):
    field_violations: list[FieldViolation] = Field(default_factory=list)


class ErrorInfo(BaseModel):
    """Structured detail attached to an RPC error."""

    error_code: str = ""
    validation_error_info: ValidationErrorInfo | None = None


class RPCError(Exception):
    """Failure reported by the remote RPC protocol."""

    def __init__(
        self,
        code: Code,
        message: str,
        details: list[ErrorInfo] | None = None,
    ) -> None:
        self.code = code
        self.message = message
        self.details = details or []
        super().__init__(f"{code}: {message}")

    def field_violations(self) -> list[FieldViolation]:
        violations: list[FieldViolation] = []
        for detail in self.details:
            if detail.validation_error_info is not None:
                violations.extend(detail.validation_error_info.field_violations)
        return violations
