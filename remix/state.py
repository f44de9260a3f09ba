"""Where each asynchronous action is up to.

An action is idle until triggered, pending while its request is out, then
either succeeded with a result or failed with an error message.
"""

from enum import Enum
from typing import Generic, Self, TypeVar

T = TypeVar("T")


class Status(Enum):
    idle = "idle"
    pending = "pending"
    succeeded = "succeeded"
    failed = "failed"


class ActionInProgress(RuntimeError):
    pass


class ActionState(Generic[T]):
    def __init__(
        self,
        status: Status = Status.idle,
        *,
        result: T | None = None,
        error: str | None = None,
    ) -> None:
        self.status = status
        self.result = result
        self.error = error

    @classmethod
    def idle(cls) -> Self:
        return cls()

    @classmethod
    def pending(cls) -> Self:
        return cls(Status.pending)

    @classmethod
    def succeeded(cls, result: T) -> Self:
        return cls(Status.succeeded, result=result)

    @classmethod
    def failed(cls, error: str) -> Self:
        return cls(Status.failed, error=error)

    @property
    def is_pending(self) -> bool:
        return self.status is Status.pending

    def __repr__(self) -> str:
        return f"<ActionState(status={self.status.value})>"
