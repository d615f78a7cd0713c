"""Exception hierarchy for the Manta client configuration."""

from __future__ import annotations

from types import MappingProxyType
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence

    from manta.config.validation import FailureReason


class MantaError(Exception):
    """Base exception for all Manta client errors."""

    def __init__(self, message: str, *, hint: str | None = None) -> None:
        super().__init__(message)
        self.hint = hint


class ConfigurationError(MantaError):
    """Configuration validation or resolution failed.

    ``reasons`` holds the ordered, structured failures so callers can inspect
    them individually. ``context`` holds a redacted echo of the settings that
    matter for diagnosing the failure; it never contains key material.
    """

    def __init__(
        self,
        message: str,
        *,
        hint: str | None = None,
        reasons: Sequence[FailureReason] = (),
        context: Mapping[str, Any] | None = None,
    ) -> None:
        super().__init__(message, hint=hint)
        self.reasons: tuple[FailureReason, ...] = tuple(reasons)
        self.context: Mapping[str, Any] = MappingProxyType(dict(context or {}))

    @property
    def messages(self) -> list[str]:
        """Human-readable reason strings in check order."""
        return [reason.message for reason in self.reasons]
