# src/manta/config/diagnostics.py

"""Redacted renderings of a ``ConfigContext`` for logs and errors.

None of these helpers ever emit the private key content, the key password or
the private encryption key bytes. Key bytes are reported by length only.
"""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING, Any

from .schema import SETTINGS, SemanticType
from .utils import REDACTED

if TYPE_CHECKING:
    from .context import ConfigContext

# Attributes rendered by describe(), in display order. Secrets are absent;
# key bytes are appended as a length.
_DESCRIBED = (
    "url",
    "user",
    "key_id",
    "key_path",
    "timeout",
    "retries",
    "max_connections",
    "http_buffer_size",
    "https_protocols",
    "https_cipher_suites",
    "no_auth",
    "disable_native_signatures",
    "tcp_socket_timeout",
    "verify_uploads",
    "upload_buffer_size",
    "client_encryption_enabled",
    "permit_unencrypted_downloads",
    "encryption_authentication_mode",
    "encryption_key_id",
    "encryption_private_key_path",
)


def _plain(value: Any) -> Any:
    return value.value if isinstance(value, Enum) else value


def key_bytes_length(context: ConfigContext) -> int | None:
    """Length of the private encryption key bytes, None when unset."""
    data = context.encryption_private_key_bytes
    return None if data is None else len(data)


def describe(context: ConfigContext) -> str:
    """Render every non-secret setting as ``name=value`` pairs.

    The output is stable for a given context and safe to log.
    """
    fields = [f"{name}={_plain(getattr(context, name))!r}" for name in _DESCRIBED]
    fields.append(f"encryption_private_key_bytes_length={key_bytes_length(context)!r}")
    return f"ConfigContext({', '.join(fields)})"


def error_context(context: ConfigContext) -> dict[str, Any]:
    """Settings echoed on a ``ConfigurationError`` to help diagnose it.

    Only the settings that commonly explain a failure are included; inline
    key content is reported as presence only.
    """
    return {
        "manta.url": context.url,
        "manta.user": context.user,
        "manta.key_id": context.key_id,
        "manta.no_auth": context.no_auth,
        "manta.key_path": context.key_path,
        "manta.key_content": "null"
        if context.private_key_content is None
        else "non-null",
        "manta.client_encryption": context.client_encryption_enabled,
    }


def to_redacted_dict(context: ConfigContext) -> dict[str, Any]:
    """Redacted dict keyed by canonical key for structured logging.

    Sensitive strings become a redaction marker, key bytes their length and
    enums their value. The base64 text form of the key bytes is skipped.
    """
    out: dict[str, Any] = {}
    for setting in SETTINGS:
        if setting.type is SemanticType.BASE64:
            continue
        value = getattr(context, setting.attribute)
        if setting.type is SemanticType.BYTES:
            out[f"{setting.key}.length"] = None if value is None else len(value)
        elif setting.sensitive and value is not None:
            out[setting.key] = REDACTED
        else:
            out[setting.key] = _plain(value)
    out["manta.home_directory"] = context.home_directory
    return out
