"""Outcome of a remove or unremove call."""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

from .exceptions import RecordInvalid, RecordNotSaved, RemovableError


class MutationStatus(str, Enum):
    """How a mutation ended."""

    SUCCESS = "success"
    ABORTED_BY_HOOK = "aborted_by_hook"
    FAILED_VALIDATION = "failed_validation"


@dataclass(frozen=True)
class MutationResult:
    """Tagged result of a mutation.

    Non-strict operations unwrap it with ``succeeded``; strict operations
    call ``raise_for_failure``.
    """

    status: MutationStatus
    record: Any
    error: Optional[RemovableError] = None

    @property
    def succeeded(self) -> bool:
        return self.status is MutationStatus.SUCCESS

    def __bool__(self) -> bool:
        return self.succeeded

    @classmethod
    def success(cls, record: Any) -> "MutationResult":
        return cls(MutationStatus.SUCCESS, record)

    @classmethod
    def from_error(cls, error: RemovableError) -> "MutationResult":
        """Tag a failure raised inside the pipeline."""
        if isinstance(error, RecordInvalid):
            status = MutationStatus.FAILED_VALIDATION
        elif isinstance(error, RecordNotSaved):
            status = MutationStatus.ABORTED_BY_HOOK
        else:
            raise TypeError(f"Not a mutation failure: {error!r}")
        return cls(status, error.record, error)

    def raise_for_failure(self) -> None:
        """Raise the captured error unless the mutation succeeded."""
        if self.error is not None:
            raise self.error
