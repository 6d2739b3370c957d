"""Uniform outcome wrapper returned by repositories and services.

Expected failure modes (not found, validation, store conflicts) are reported
as failed Results carrying human-readable messages. Unexpected errors are
never converted and propagate to the caller unchanged.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, TypeVar

from pydantic import ValidationError

from .enums import FailureKind

T = TypeVar("T")


@dataclass(frozen=True)
class Result(Generic[T]):
    """Success (optionally carrying data) or failure (carrying messages).

    A failed result never carries data and always carries a FailureKind.
    Callers branch on succeeded and display messages verbatim.
    """

    succeeded: bool
    data: T | None = None
    messages: tuple[str, ...] = ()
    kind: FailureKind | None = None

    def __post_init__(self) -> None:
        if not self.succeeded:
            if self.data is not None:
                raise ValueError("A failed Result cannot carry data")
            if self.kind is None:
                raise ValueError("A failed Result must declare a FailureKind")
        elif self.kind is not None:
            raise ValueError("A successful Result cannot carry a FailureKind")

    @property
    def failed(self) -> bool:
        return not self.succeeded

    @classmethod
    def success(cls, data: T | None = None, *messages: str) -> Result[T]:
        return cls(succeeded=True, data=data, messages=tuple(messages))

    @classmethod
    def fail(
        cls, *messages: str, kind: FailureKind = FailureKind.PERSISTENCE
    ) -> Result[T]:
        return cls(succeeded=False, messages=tuple(messages), kind=kind)

    @classmethod
    def propagate(cls, failure: Result) -> Result[T]:
        """Re-type a failed result so it can be returned from another operation."""
        if failure.succeeded:
            raise ValueError("Only failed results can be propagated")
        return cls(succeeded=False, messages=failure.messages, kind=failure.kind)

    @classmethod
    def invalid(cls, error: ValidationError, prefix: str | None = None) -> Result[T]:
        """Build a validation failure with one "<field>: <message>" line per error."""
        return cls.fail(*validation_messages(error, prefix), kind=FailureKind.VALIDATION)


def validation_messages(error: ValidationError, prefix: str | None = None) -> list[str]:
    messages = []
    for detail in error.errors():
        field = ".".join(str(part) for part in detail["loc"]) or "__root__"
        line = f"{field}: {detail['msg']}"
        messages.append(f"{prefix}: {line}" if prefix else line)
    return messages
