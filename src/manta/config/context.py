# src/manta/config/context.py

"""Read-only configuration views consumed by the Manta client.

``ConfigContext`` is the capability every configuration source satisfies:
one read-only attribute per setting plus the derived ``home_directory``.
``StandardConfigContext`` is the immutable record produced by the resolver
and by the map/env constructors; ``merge_contexts`` overlays several views
by precedence.
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from functools import cache
import logging
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

from manta.models import EncryptionAuthenticationMode

from .schema import ATTRIBUTES
from .utils import default_key_path, derive_home_directory

if TYPE_CHECKING:
    from collections.abc import Mapping

log = logging.getLogger(__name__)

# Settings whose later-layer presence clears the other one inherited from
# lower layers: a signing key comes either from a file or inline content.
_EXCLUSIVE_KEY_SOURCES = {
    "private_key_content": "key_path",
    "key_path": "private_key_content",
}

DEFAULT_URL = "https://us-east.manta.joyent.com:443"
DEFAULT_HTTPS_PROTOCOLS = "TLSv1.2"
DEFAULT_HTTPS_CIPHER_SUITES = ",".join(
    (
        "TLS_ECDHE_ECDSA_WITH_AES_256_GCM_SHA384",
        "TLS_ECDHE_RSA_WITH_AES_256_GCM_SHA384",
        "TLS_ECDHE_ECDSA_WITH_AES_256_CBC_SHA384",
        "TLS_ECDHE_RSA_WITH_AES_256_CBC_SHA384",
        "TLS_ECDHE_ECDSA_WITH_AES_128_GCM_SHA256",
        "TLS_ECDHE_RSA_WITH_AES_128_GCM_SHA256",
        "TLS_ECDHE_ECDSA_WITH_AES_128_CBC_SHA256",
        "TLS_ECDHE_RSA_WITH_AES_128_CBC_SHA256",
    )
)


@runtime_checkable
class ConfigContext(Protocol):
    """Read-only view of every setting the Manta client understands.

    Accessors never perform I/O or validation and return None for unset
    settings.
    """

    @property
    def url(self) -> str | None: ...

    @property
    def user(self) -> str | None: ...

    @property
    def key_id(self) -> str | None: ...

    @property
    def key_path(self) -> str | None: ...

    @property
    def private_key_content(self) -> str | None: ...

    @property
    def password(self) -> str | None: ...

    @property
    def timeout(self) -> int | None: ...

    @property
    def home_directory(self) -> str | None: ...

    @property
    def retries(self) -> int | None: ...

    @property
    def max_connections(self) -> int | None: ...

    @property
    def http_buffer_size(self) -> int | None: ...

    @property
    def https_protocols(self) -> str | None: ...

    @property
    def https_cipher_suites(self) -> str | None: ...

    @property
    def no_auth(self) -> bool | None: ...

    @property
    def disable_native_signatures(self) -> bool | None: ...

    @property
    def tcp_socket_timeout(self) -> int | None: ...

    @property
    def verify_uploads(self) -> bool | None: ...

    @property
    def upload_buffer_size(self) -> int | None: ...

    @property
    def client_encryption_enabled(self) -> bool | None: ...

    @property
    def permit_unencrypted_downloads(self) -> bool | None: ...

    @property
    def encryption_authentication_mode(self) -> EncryptionAuthenticationMode | None: ...

    @property
    def encryption_key_id(self) -> str | None: ...

    @property
    def encryption_private_key_path(self) -> str | None: ...

    @property
    def encryption_private_key_bytes(self) -> bytes | None: ...


@dataclass(frozen=True, repr=False)
class StandardConfigContext:
    """Immutable configuration record implementing ``ConfigContext``.

    ``str()`` and ``repr()`` render the redacted diagnostic form so key
    material never reaches logs through an accidental print.
    """

    url: str | None = None
    user: str | None = None
    key_id: str | None = None
    key_path: str | None = None
    timeout: int | None = None
    retries: int | None = None
    max_connections: int | None = None
    private_key_content: str | None = None
    password: str | None = None
    http_buffer_size: int | None = None
    https_protocols: str | None = None
    https_cipher_suites: str | None = None
    no_auth: bool | None = None
    disable_native_signatures: bool | None = None
    tcp_socket_timeout: int | None = None
    verify_uploads: bool | None = None
    upload_buffer_size: int | None = None
    client_encryption_enabled: bool | None = None
    permit_unencrypted_downloads: bool | None = None
    encryption_key_id: str | None = None
    encryption_authentication_mode: EncryptionAuthenticationMode | None = None
    encryption_private_key_path: str | None = None
    encryption_private_key_bytes: bytes | None = None

    @property
    def home_directory(self) -> str | None:
        return derive_home_directory(self.user)

    def replace(self, **changes: Any) -> StandardConfigContext:
        """Return a copy with the given attributes changed."""
        return dataclasses.replace(self, **changes)

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, Any]) -> StandardConfigContext:
        """Build a context from canonical keys, env aliases or attribute names.

        Values are coerced through the ``Settings`` schema; unrecognized
        keys are ignored.

        Raises:
            ConfigurationError: If a value cannot be coerced to its type.
        """
        from .core import coerce_settings
        from .loaders import normalize_keys

        return cls(**coerce_settings(normalize_keys(mapping)))

    @classmethod
    def from_env(
        cls, environ: Mapping[str, str] | None = None
    ) -> StandardConfigContext:
        """Build a context from registered ``MANTA_*`` environment variables."""
        from .core import coerce_settings
        from .loaders import load_env

        return cls(**coerce_settings(load_env(environ)))

    def __str__(self) -> str:
        from .diagnostics import describe

        return describe(self)

    __repr__ = __str__


def snapshot(context: ConfigContext) -> StandardConfigContext:
    """Copy any ``ConfigContext`` into an immutable ``StandardConfigContext``."""
    if isinstance(context, StandardConfigContext):
        return context
    return StandardConfigContext(**{a: getattr(context, a) for a in ATTRIBUTES})


def overlay(values: dict[str, Any], layer: Mapping[str, Any]) -> list[str]:
    """Apply one precedence layer of attribute values onto ``values`` in place.

    None values in ``layer`` never override. Returns attributes that were
    cleared because the layer chose the other signing key source.
    """
    present = {k: v for k, v in layer.items() if v is not None}
    cleared: list[str] = []
    for attribute, other in _EXCLUSIVE_KEY_SOURCES.items():
        if attribute in present and other not in present and other in values:
            del values[other]
            cleared.append(other)
    values.update(present)
    return cleared


def merge_contexts(*contexts: ConfigContext) -> StandardConfigContext:
    """Overlay contexts in order; later contexts take precedence."""
    values: dict[str, Any] = {}
    for context in contexts:
        cleared = overlay(values, {a: getattr(context, a) for a in ATTRIBUTES})
        if cleared:
            log.debug("Cleared inherited %s in favor of a higher layer", cleared)
    return StandardConfigContext(**values)


@cache
def defaults_context() -> StandardConfigContext:
    """Built-in defaults, the lowest precedence layer."""
    return StandardConfigContext(
        url=DEFAULT_URL,
        key_path=default_key_path(),
        timeout=20_000,
        retries=3,
        max_connections=24,
        http_buffer_size=4096,
        https_protocols=DEFAULT_HTTPS_PROTOCOLS,
        https_cipher_suites=DEFAULT_HTTPS_CIPHER_SUITES,
        no_auth=False,
        disable_native_signatures=False,
        tcp_socket_timeout=10_000,
        verify_uploads=True,
        upload_buffer_size=16_384,
        client_encryption_enabled=False,
        permit_unencrypted_downloads=False,
        encryption_authentication_mode=EncryptionAuthenticationMode.default(),
    )
