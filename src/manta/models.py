"""Enumerated setting values shared by the configuration and the client."""

from __future__ import annotations

from contextlib import suppress
from enum import Enum
from typing import Any


class EncryptionAuthenticationMode(Enum):
    """How strictly ciphertext integrity is verified on read."""

    STRICT = "Strict"
    OPTIONAL = "Optional"

    @classmethod
    def default(cls) -> EncryptionAuthenticationMode:
        return cls.STRICT

    @classmethod
    def parse(cls, value: Any) -> Any:
        """Accept enum instances, values ("Strict") or names ("STRICT").

        Matching is case-insensitive. Anything unrecognized is returned as-is
        so pydantic can report it with a precise message.
        """
        if value is None or isinstance(value, cls):
            return value
        if isinstance(value, str):
            text = value.strip()
            with suppress(ValueError):
                return cls(text)
            with suppress(KeyError):
                return cls[text.upper()]
        return value
