"""Error taxonomy for the ordering screen."""

from __future__ import annotations

from pos_order.result import Err


class PosError(Exception):
    """Base class for errors surfaced to the cashier."""


class ConfigError(PosError):
    """Backend credentials or other required settings are missing."""


class ValidationError(PosError):
    """A local precondition failed; nothing was written."""


class PersistenceError(PosError):
    """A backend write returned an error value."""

    def __init__(self, message: str, err: Err | None = None) -> None:
        super().__init__(message)
        self.err = err


class SeedingError(PosError):
    """Existing orders could not be loaded to seed order numbering."""
