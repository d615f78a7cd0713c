# src/manta/config/lookup.py

"""Generic key-based access to a ``ConfigContext``.

Any canonical key or environment alias resolves through the schema table to
the same attribute. Unknown keys are a miss, not an error.
"""

from __future__ import annotations

import base64
from typing import TYPE_CHECKING, Any

from .schema import SemanticType, setting_for
from .utils import REDACTED

if TYPE_CHECKING:
    from collections.abc import Iterable

    from .context import ConfigContext


def lookup(key: str, context: ConfigContext) -> Any | None:
    """Return the value stored under ``key`` in ``context``.

    The base64 form of the private encryption key returns base64 text, or
    None when no key bytes are set.

    Args:
        key: Canonical key (``manta.url``) or env alias (``MANTA_URL``).
        context: Configuration view to read from.

    Returns:
        The setting value, or None for unknown keys and unset settings.
    """
    setting = setting_for(key)
    if setting is None:
        return None
    value = getattr(context, setting.attribute)
    if setting.type is SemanticType.BASE64:
        if value is None:
            return None
        return base64.b64encode(value).decode("ascii")
    return value


def lookup_many(keys: Iterable[str], context: ConfigContext) -> dict[str, Any]:
    """Look up several keys at once, preserving the requested order."""
    return {key: lookup(key, context) for key in keys}


def redacted_lookup(key: str, context: ConfigContext) -> Any | None:
    """Like ``lookup`` but safe to print.

    Sensitive strings become a redaction marker and key bytes their length.
    """
    setting = setting_for(key)
    if setting is None:
        return None
    value = getattr(context, setting.attribute)
    if value is None or not setting.sensitive:
        return value
    if isinstance(value, bytes | bytearray):
        return f"<{len(value)} bytes>"
    return REDACTED
