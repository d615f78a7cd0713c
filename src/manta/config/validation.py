# src/manta/config/validation.py

"""Consistency checks run on a resolved configuration before client start.

Every rule runs on every call; failures accumulate in a fixed order so the
same context always yields the same list. The only I/O is probing the
encryption key file, and probe errors become failures rather than raising.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
import logging
import os
from pathlib import Path
import re
import string
from typing import TYPE_CHECKING
import unicodedata

from manta.errors import ConfigurationError
from manta.result import Failure, Success

from .diagnostics import error_context

if TYPE_CHECKING:
    from .context import ConfigContext

log = logging.getLogger(__name__)

ERROR_HEADER = "Errors when loading Manta SDK configuration:"
UNSUPPORTED_FINGERPRINT_PREFIX = "SHA256:"

# URI character classes (RFC 2396 plus the RFC 2732 brackets); '%' escapes
# are checked separately.
_ALPHA = frozenset(string.ascii_letters)
_SCHEME_CHARS = _ALPHA | frozenset(string.digits + "+-.")
_UNRESERVED = _ALPHA | frozenset(string.digits + "-_.!~*'()")
_PUNCT = frozenset(",;:$&+=")
_URIC = _UNRESERVED | _PUNCT | frozenset("?/[]@")
_PATH = _UNRESERVED | _PUNCT | frozenset("@/")
_AUTHORITY = _UNRESERVED | _PUNCT | frozenset("@")
_IPV6_AUTHORITY = re.compile(
    r"(?:[A-Za-z0-9\-_.!~*'(),;:$&+=%]*@)?\[[0-9A-Fa-f:.]+\](?::[0-9]*)?"
)
_HEX = frozenset("0123456789abcdefABCDEF")

# Characters a key id may not contain besides Unicode space separators.
# No-break spaces are not whitespace here.
_WHITESPACE = frozenset("\t\n\x0b\x0c\r\x1c\x1d\x1e\x1f")
_NO_BREAK_SPACES = frozenset("\u00a0\u2007\u202f")


class FailureCode(str, Enum):
    """Stable identifiers for each validation rule."""

    ACCOUNT_MISSING = "account_missing"
    URL_MISSING = "url_missing"
    URL_INVALID = "url_invalid"
    TIMEOUT_NEGATIVE = "timeout_negative"
    KEY_ID_MISSING = "key_id_missing"
    KEY_ID_UNSUPPORTED_FINGERPRINT = "key_id_unsupported_fingerprint"
    ENCRYPTION_KEY_ID_NULL = "encryption_key_id_null"
    ENCRYPTION_KEY_ID_EMPTY = "encryption_key_id_empty"
    ENCRYPTION_KEY_ID_WHITESPACE = "encryption_key_id_whitespace"
    ENCRYPTION_KEY_ID_NOT_ASCII = "encryption_key_id_not_ascii"
    ENCRYPTION_AUTH_MODE_NULL = "encryption_auth_mode_null"
    PERMIT_UNENCRYPTED_DOWNLOADS_NULL = "permit_unencrypted_downloads_null"
    ENCRYPTION_KEY_MISSING = "encryption_key_missing"
    ENCRYPTION_KEY_CONFLICT = "encryption_key_conflict"
    ENCRYPTION_KEY_FILE_MISSING = "encryption_key_file_missing"
    ENCRYPTION_KEY_FILE_UNREADABLE = "encryption_key_file_unreadable"
    ENCRYPTION_KEY_FILE_INACCESSIBLE = "encryption_key_file_inaccessible"
    ENCRYPTION_KEY_BYTES_EMPTY = "encryption_key_bytes_empty"
    # Raised while resolving layers, before the rules above run.
    INVALID_VALUE = "invalid_value"


@dataclass(frozen=True)
class FailureReason:
    """One failed rule: a stable code, the message, and the setting involved."""

    code: FailureCode
    message: str
    setting: str | None = None

    def __str__(self) -> str:
        return self.message


def _is_blank(value: str | None) -> bool:
    return value is None or not value.strip()


def _scan(
    url: str, start: int, end: int, allowed: frozenset[str], part: str
) -> str | None:
    """Check ``url[start:end]`` against one component's character class."""
    index = start
    while index < end:
        char = url[index]
        if char == "%":
            pair = url[index + 1 : min(index + 3, end)]
            if len(pair) != 2 or not set(pair) <= _HEX:
                return f"Malformed escape pair at index {index}"
            index += 3
            continue
        if char.isascii():
            if char not in allowed:
                return f"Illegal character in {part} at index {index}"
        elif not char.isprintable():
            return f"Illegal character in {part} at index {index}"
        index += 1
    return None


def _authority_error(url: str, start: int, end: int) -> str | None:
    authority = url[start:end]
    open_at = authority.find("[")
    if open_at < 0:
        return _scan(url, start, end, _AUTHORITY, "authority")
    if authority.find("]", open_at) < 0:
        return f"Expected closing bracket for IPv6 address at index {end}"
    if not _IPV6_AUTHORITY.fullmatch(authority):
        return f"Malformed IPv6 address at index {start + open_at + 1}"
    return None


def _hierarchical_error(url: str, start: int, end: int) -> str | None:
    query_at = url.find("?", start, end)
    path_end = end if query_at < 0 else query_at
    index = start
    if url.startswith("//", start):
        index = start + 2
        if index >= len(url):
            return f"Expected authority at index {index}"
        slash = url.find("/", index, path_end)
        authority_end = path_end if slash < 0 else slash
        if problem := _authority_error(url, index, authority_end):
            return problem
        index = authority_end
    if problem := _scan(url, index, path_end, _PATH, "path"):
        return problem
    if query_at >= 0:
        return _scan(url, query_at + 1, end, _URIC, "query")
    return None


def uri_syntax_error(url: str) -> str | None:
    """Describe why ``url`` is not a syntactically valid URI, or None if it is.

    Follows the RFC 2396 grammar with RFC 2732 IPv6 literals. Brackets are
    illegal in the path, and the port is not range checked.
    """
    hash_at = url.find("#")
    body_end = len(url) if hash_at < 0 else hash_at

    start = 0
    opaque = False
    head = re.split(r"[/?#]", url, maxsplit=1)[0]
    if ":" in head:
        scheme = url[: url.index(":")]
        if not scheme:
            return "Expected scheme name at index 0"
        for index, char in enumerate(scheme):
            allowed = _ALPHA if index == 0 else _SCHEME_CHARS
            if char not in allowed:
                return f"Illegal character in scheme name at index {index}"
        start = len(scheme) + 1
        if start >= body_end:
            return f"Expected scheme-specific part at index {start}"
        opaque = url[start] != "/"

    if opaque:
        problem = _scan(url, start, body_end, _URIC, "opaque part")
    else:
        problem = _hierarchical_error(url, start, body_end)
    if problem is None and hash_at >= 0:
        problem = _scan(url, hash_at + 1, len(url), _URIC, "fragment")
    return problem


def _check_encryption_key_file(path: str) -> FailureReason | None:
    key = "manta.encryption_key_path"
    try:
        key_file = Path(path).expanduser()
        if not key_file.exists():
            return FailureReason(
                FailureCode.ENCRYPTION_KEY_FILE_MISSING,
                f"Key file couldn't be found at path: {path}",
                key,
            )
        if not os.access(key_file, os.R_OK):
            return FailureReason(
                FailureCode.ENCRYPTION_KEY_FILE_UNREADABLE,
                f"Key file couldn't be read at path: {path}",
                key,
            )
    except (OSError, ValueError) as e:
        return FailureReason(
            FailureCode.ENCRYPTION_KEY_FILE_INACCESSIBLE,
            f"Key file couldn't be accessed at path: {path} ({e})",
            key,
        )
    return None


def _is_whitespace(char: str) -> bool:
    """Control whitespace or a breaking Unicode space separator."""
    if char in _WHITESPACE:
        return True
    return (
        unicodedata.category(char) in {"Zs", "Zl", "Zp"}
        and char not in _NO_BREAK_SPACES
    )


def _encryption_failures(config: ConfigContext) -> list[FailureReason]:
    failures: list[FailureReason] = []

    def fail(code: FailureCode, message: str, setting: str) -> None:
        failures.append(FailureReason(code, message, setting))

    key_id = config.encryption_key_id
    if key_id is None:
        fail(
            FailureCode.ENCRYPTION_KEY_ID_NULL,
            "Encryption key id must not be null",
            "manta.encryption_key_id",
        )
    if not key_id:
        fail(
            FailureCode.ENCRYPTION_KEY_ID_EMPTY,
            "Encryption key id must not be empty",
            "manta.encryption_key_id",
        )
    if key_id is not None and any(_is_whitespace(c) for c in key_id):
        fail(
            FailureCode.ENCRYPTION_KEY_ID_WHITESPACE,
            "Encryption key id must not contain whitespace",
            "manta.encryption_key_id",
        )
    # A missing id is not printable ASCII either.
    if key_id is None or not all(32 <= ord(c) < 127 for c in key_id):
        fail(
            FailureCode.ENCRYPTION_KEY_ID_NOT_ASCII,
            "Encryption key id must only contain printable ASCII characters",
            "manta.encryption_key_id",
        )

    if config.encryption_authentication_mode is None:
        fail(
            FailureCode.ENCRYPTION_AUTH_MODE_NULL,
            "Encryption authentication mode must not be null",
            "manta.encryption_auth_mode",
        )

    if config.permit_unencrypted_downloads is None:
        fail(
            FailureCode.PERMIT_UNENCRYPTED_DOWNLOADS_NULL,
            "Encryption setting permit unencrypted downloads must not be null",
            "manta.permit_unencrypted_downloads",
        )

    key_path = config.encryption_private_key_path
    key_bytes = config.encryption_private_key_bytes
    if key_path is None and key_bytes is None:
        fail(
            FailureCode.ENCRYPTION_KEY_MISSING,
            "Both encryption private key path and private key bytes must not be null",
            "manta.encryption_key_path",
        )
    if key_path is not None and key_bytes is not None:
        fail(
            FailureCode.ENCRYPTION_KEY_CONFLICT,
            "Both encryption private key path and private key bytes must "
            "not be set. Choose one or the other.",
            "manta.encryption_key_path",
        )
    if key_path is not None and (probe := _check_encryption_key_file(key_path)):
        failures.append(probe)
    if key_bytes is not None and len(key_bytes) == 0:
        fail(
            FailureCode.ENCRYPTION_KEY_BYTES_EMPTY,
            "Encryption private key byte length must be greater than zero",
            "manta.encryption_key_bytes",
        )
    return failures


def collect_failures(config: ConfigContext) -> tuple[FailureReason, ...]:
    """Run every rule and return the failures in rule order.

    Never raises for an invalid configuration; an empty tuple means valid.
    """
    failures: list[FailureReason] = []

    if _is_blank(config.user):
        failures.append(
            FailureReason(
                FailureCode.ACCOUNT_MISSING,
                "Manta account name must be specified",
                "manta.user",
            )
        )

    url = config.url
    if url is None or _is_blank(url):
        failures.append(
            FailureReason(
                FailureCode.URL_MISSING, "Manta URL must be specified", "manta.url"
            )
        )
    elif (problem := uri_syntax_error(url)) is not None:
        failures.append(
            FailureReason(
                FailureCode.URL_INVALID,
                f"{problem} - invalid Manta URL: {url}",
                "manta.url",
            )
        )

    if config.timeout is not None and config.timeout < 0:
        failures.append(
            FailureReason(
                FailureCode.TIMEOUT_NEGATIVE,
                "Manta timeout must be 0 or greater",
                "manta.timeout",
            )
        )

    if config.no_auth is not True and config.key_id is None:
        failures.append(
            FailureReason(
                FailureCode.KEY_ID_MISSING,
                "Manta key id must be specified",
                "manta.key_id",
            )
        )

    if config.key_id is not None and config.key_id.startswith(
        UNSUPPORTED_FINGERPRINT_PREFIX
    ):
        failures.append(
            FailureReason(
                FailureCode.KEY_ID_UNSUPPORTED_FINGERPRINT,
                "We don't support SHA256 fingerprints yet. "
                "Change fingerprint to MD5 format.",
                "manta.key_id",
            )
        )

    if config.client_encryption_enabled:
        failures.extend(_encryption_failures(config))

    return tuple(failures)


def build_error(
    config: ConfigContext, failures: tuple[FailureReason, ...]
) -> ConfigurationError:
    """Create the error reported for a non-empty failure list."""
    message = "\n".join([ERROR_HEADER, *(f.message for f in failures)])
    return ConfigurationError(
        message,
        hint="Run `manta-config audit` to see where each setting came from.",
        reasons=failures,
        context=error_context(config),
    )


def check(
    config: ConfigContext,
) -> Success[ConfigContext] | Failure[ConfigurationError]:
    """Validate without raising; the failure carries the full error."""
    failures = collect_failures(config)
    if not failures:
        return Success(config)
    log.debug(
        "Configuration validation found %d problem(s): %s",
        len(failures),
        [f.code.value for f in failures],
    )
    return Failure(build_error(config, failures))


def validate(config: ConfigContext) -> None:
    """Raise once with every problem found in ``config``.

    Raises:
        ConfigurationError: If any rule fails. ``reasons`` lists them in rule
            order and ``context`` echoes the relevant settings, redacted.
    """
    result = check(config)
    if isinstance(result, Failure):
        raise result.error
