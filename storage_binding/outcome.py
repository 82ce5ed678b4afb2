"""Result type for storage operations."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from .exceptions import StorageBindingError


@dataclass(frozen=True)
class OperationOutcome:
    """Result of a single store interaction.

    Exactly one of ``value`` (on success) or ``error`` (on failure) is
    meaningful. Outcomes are returned, never raised.
    """

    ok: bool
    value: Any = None
    error: StorageBindingError | None = None

    @classmethod
    def success(cls, value: Any = None) -> OperationOutcome:
        return cls(ok=True, value=value)

    @classmethod
    def failure(cls, error: StorageBindingError) -> OperationOutcome:
        return cls(ok=False, error=error)

    @property
    def message(self) -> str | None:
        """Error message of a failed outcome."""
        return self.error.message if self.error is not None else None
