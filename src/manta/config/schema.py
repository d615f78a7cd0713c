# src/manta/config/schema.py

"""The fixed catalogue of settings understood by the Manta client.

Every setting has an attribute name on ``ConfigContext``, a canonical key
used by map-backed sources, and (for most settings) an environment alias
used by environment-backed sources. Both key forms resolve through a single
read-only table built once at import.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Mapping


class SemanticType(str, Enum):
    """Value kind carried by a setting."""

    STRING = "string"
    INTEGER = "integer"
    BOOLEAN = "boolean"
    BYTES = "bytes"
    BASE64 = "base64"  # text form of a byte setting
    ENUM = "enum"


@dataclass(frozen=True)
class Setting:
    """One entry of the schema."""

    attribute: str
    key: str
    env_key: str | None
    type: SemanticType
    description: str
    sensitive: bool = False


SETTINGS: tuple[Setting, ...] = (
    Setting("url", "manta.url", "MANTA_URL", SemanticType.STRING,
            "Manta service endpoint"),
    Setting("user", "manta.user", "MANTA_USER", SemanticType.STRING,
            "Account (optionally account/subuser) used to access Manta"),
    Setting("key_id", "manta.key_id", "MANTA_KEY_ID", SemanticType.STRING,
            "MD5 fingerprint of the private key used to sign requests"),
    Setting("key_path", "manta.key_path", "MANTA_KEY_PATH", SemanticType.STRING,
            "Filesystem path of the private signing key"),
    Setting("timeout", "manta.timeout", "MANTA_TIMEOUT", SemanticType.INTEGER,
            "General connection timeout in milliseconds"),
    Setting("retries", "manta.retries", "MANTA_HTTP_RETRIES", SemanticType.INTEGER,
            "Number of HTTP retries on failure"),
    Setting("max_connections", "manta.max_connections", "MANTA_MAX_CONNS",
            SemanticType.INTEGER, "Maximum number of open connections"),
    Setting("private_key_content", "manta.key_content", "MANTA_KEY_CONTENT",
            SemanticType.STRING, "Inline private signing key content",
            sensitive=True),
    Setting("password", "manta.password", "MANTA_PASSWORD", SemanticType.STRING,
            "Password protecting the private signing key", sensitive=True),
    Setting("http_buffer_size", "manta.http_buffer_size", "MANTA_HTTP_BUFFER_SIZE",
            SemanticType.INTEGER, "Buffer size in bytes for HTTP streams"),
    Setting("https_protocols", "https.protocols", "MANTA_HTTPS_PROTOCOLS",
            SemanticType.STRING, "Comma separated list of TLS protocols"),
    Setting("https_cipher_suites", "https.cipherSuites", "MANTA_HTTPS_CIPHERS",
            SemanticType.STRING, "Comma separated list of TLS cipher suites"),
    Setting("no_auth", "manta.no_auth", "MANTA_NO_AUTH", SemanticType.BOOLEAN,
            "Disable HTTP signature authentication"),
    Setting("disable_native_signatures", "manta.disable_native_sigs",
            "MANTA_NO_NATIVE_SIGS", SemanticType.BOOLEAN,
            "Disable native code for generating HTTP signatures"),
    Setting("tcp_socket_timeout", "manta.tcp_socket_timeout",
            "MANTA_TCP_SOCKET_TIMEOUT", SemanticType.INTEGER,
            "Milliseconds to wait before a TCP socket times out"),
    Setting("verify_uploads", "manta.verify_uploads", "MANTA_VERIFY_UPLOADS",
            SemanticType.BOOLEAN, "Verify upload checksums against the server"),
    Setting("upload_buffer_size", "manta.upload_buffer_size",
            "MANTA_UPLOAD_BUFFER_SIZE", SemanticType.INTEGER,
            "Bytes buffered in memory before streaming an upload"),
    Setting("client_encryption_enabled", "manta.client_encryption",
            "MANTA_CLIENT_ENCRYPTION", SemanticType.BOOLEAN,
            "Enable client-side encryption"),
    Setting("permit_unencrypted_downloads", "manta.permit_unencrypted_downloads",
            "MANTA_UNENCRYPTED_DOWNLOADS", SemanticType.BOOLEAN,
            "Allow downloading unencrypted objects in encryption mode"),
    Setting("encryption_key_id", "manta.encryption_key_id",
            "MANTA_CLIENT_ENCRYPTION_KEY_ID", SemanticType.STRING,
            "Printable ASCII identifier of the encryption key"),
    Setting("encryption_authentication_mode", "manta.encryption_auth_mode",
            "MANTA_ENCRYPTION_AUTH_MODE", SemanticType.ENUM,
            "Ciphertext authentication mode (Strict or Optional)"),
    Setting("encryption_private_key_path", "manta.encryption_key_path",
            "MANTA_ENCRYPTION_KEY_PATH", SemanticType.STRING,
            "Filesystem path of the private encryption key"),
    Setting("encryption_private_key_bytes", "manta.encryption_key_bytes", None,
            SemanticType.BYTES, "Private encryption key bytes", sensitive=True),
    Setting("encryption_private_key_bytes", "manta.encryption_key_bytes_base64",
            "MANTA_ENCRYPTION_KEY_BYTES", SemanticType.BASE64,
            "Private encryption key bytes, base64 encoded", sensitive=True),
)  # fmt: skip


def _build_table(settings: tuple[Setting, ...]) -> Mapping[str, Setting]:
    table: dict[str, Setting] = {}
    for setting in settings:
        for name in (setting.key, setting.env_key):
            if name is None:
                continue
            if name in table:
                raise ValueError(f"Duplicate setting key: {name}")
            table[name] = setting
    return MappingProxyType(table)


_BY_KEY: Mapping[str, Setting] = _build_table(SETTINGS)

# Attribute names in schema order, each listed once.
ATTRIBUTES: tuple[str, ...] = tuple(dict.fromkeys(s.attribute for s in SETTINGS))


def setting_for(key: str) -> Setting | None:
    """Return the setting registered under a canonical key or env alias."""
    return _BY_KEY.get(key)


def canonical_keys() -> tuple[str, ...]:
    """Canonical keys in schema order."""
    return tuple(s.key for s in SETTINGS)


def env_keys() -> tuple[str, ...]:
    """Registered environment aliases in schema order."""
    return tuple(s.env_key for s in SETTINGS if s.env_key is not None)


def primary_setting(attribute: str) -> Setting:
    """Return the first (non-text) setting for an attribute name.

    Raises:
        KeyError: If the attribute is not part of the schema.
    """
    for setting in SETTINGS:
        if setting.attribute == attribute:
            return setting
    raise KeyError(attribute)
