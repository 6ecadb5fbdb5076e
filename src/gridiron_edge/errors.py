"""Error taxonomy shared by the pipeline, the CLI and the response builders."""

from __future__ import annotations

from enum import Enum


class ErrorCode(str, Enum):
    BAD_REQUEST = "BAD_REQUEST"
    TOKEN_LIMIT_EXCEEDED = "TOKEN_LIMIT_EXCEEDED"
    COST_LIMIT_EXCEEDED = "COST_LIMIT_EXCEEDED"
    WRAPPER_TIMEOUT = "WRAPPER_TIMEOUT"
    MODEL_ERROR = "MODEL_ERROR"
    NETWORK_ERROR = "NETWORK_ERROR"
    BAD_WRAPPER_RESPONSE = "BAD_WRAPPER_RESPONSE"
    BAD_PARSED_SCHEMA = "BAD_PARSED_SCHEMA"
    CLIENT_ABORT = "CLIENT_ABORT"
    UNKNOWN_ERROR = "UNKNOWN_ERROR"


class GridironError(Exception):
    """Base error carrying a machine-readable code.

    Attributes:
        code: ErrorCode identifying the failure
        details: optional structured context for the response envelope
        recoverable: whether the caller may retry or degrade
    """

    recoverable = False

    def __init__(
        self,
        code: ErrorCode,
        message: str,
        details: dict[str, object] | None = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.details = details or {}

    def to_dict(self) -> dict[str, object]:
        payload: dict[str, object] = {
            "code": self.code.value,
            "message": self.message,
            "recoverable": self.recoverable,
        }
        if self.details:
            payload["details"] = self.details
        return payload


class RequestValidationError(GridironError):
    """Malformed or oversized input. Terminal for the request."""

    def __init__(self, message: str, details: dict[str, object] | None = None) -> None:
        super().__init__(ErrorCode.BAD_REQUEST, message, details)


class GuardrailError(GridironError):
    """Request exceeds a token or cost limit. Terminal for the request."""


class GeneratorError(GridironError):
    """Generator call failed (timeout, malformed response, schema mismatch)."""

    def __init__(
        self,
        code: ErrorCode,
        message: str,
        details: dict[str, object] | None = None,
        recoverable: bool = True,
    ) -> None:
        super().__init__(code, message, details)
        self.recoverable = recoverable


class OperationCancelled(GridironError):
    """The caller's cancellation token was set."""

    def __init__(self, stage: str) -> None:
        super().__init__(ErrorCode.CLIENT_ABORT, f"Cancelled during {stage}", {"stage": stage})


def check_cancelled(cancel: object | None, stage: str) -> None:
    """Raise OperationCancelled if ``cancel`` (anything with ``is_set()``) is set."""
    if cancel is not None and cancel.is_set():  # type: ignore[attr-defined]
        raise OperationCancelled(stage)
