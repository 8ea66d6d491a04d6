"""Result values returned by backend writes."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, TypeVar, Union

T = TypeVar("T")


@dataclass(frozen=True)
class Ok(Generic[T]):
    """A successful backend call and the stored value."""

    value: T

    @property
    def ok(self) -> bool:
        return True


@dataclass(frozen=True)
class Err:
    """A failed backend call with a readable reason."""

    reason: str
    status_code: int | None = None

    @property
    def ok(self) -> bool:
        return False

    def __str__(self) -> str:
        if self.status_code is None:
            return self.reason
        return f"{self.reason} (HTTP {self.status_code})"


Result = Union[Ok[T], Err]
