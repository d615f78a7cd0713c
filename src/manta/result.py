"""Result type for checks that report failures as data.

Lets callers branch on a validation outcome without wrapping every call in
try/except; ``unwrap`` turns a failure back into the raised error.
"""

from __future__ import annotations

import dataclasses
import typing

TSuccess = typing.TypeVar("TSuccess")
TFailure = typing.TypeVar("TFailure", bound=Exception)


@dataclasses.dataclass(frozen=True, slots=True)
class Success[TSuccess]:
    """A passing check carrying the checked value."""

    value: TSuccess

    @property
    def ok(self) -> bool:
        return True

    def unwrap(self) -> TSuccess:
        return self.value


@dataclasses.dataclass(frozen=True, slots=True)
class Failure[TFailure]:
    """A failing check carrying the error that explains it."""

    error: TFailure

    @property
    def ok(self) -> bool:
        return False

    def unwrap(self) -> typing.NoReturn:
        raise self.error


Result = Success[TSuccess] | Failure[TFailure]
