"""Manta client configuration.

Public API:
    - resolve_config(): Layered configuration resolution
    - validate(): Pre-flight consistency check before building a client
    - lookup(): Read a setting by canonical key or environment alias
    - describe(): Redacted, loggable rendering of a configuration
"""

from __future__ import annotations

import logging

from manta.config import (
    ConfigContext,
    StandardConfigContext,
    derive_home_directory,
    describe,
    lookup,
    merge_contexts,
    resolve_config,
    validate,
)
from manta.errors import ConfigurationError, MantaError
from manta.models import EncryptionAuthenticationMode

try:
    from importlib.metadata import PackageNotFoundError, version

    __version__ = version("manta-client")
except PackageNotFoundError:
    __version__ = "0.0.0+unknown"

# Library-level NullHandler: stay silent unless the consumer configures logging.
logging.getLogger("manta").addHandler(logging.NullHandler())

__all__ = [
    "ConfigContext",
    "ConfigurationError",
    "EncryptionAuthenticationMode",
    "MantaError",
    "StandardConfigContext",
    "derive_home_directory",
    "describe",
    "lookup",
    "merge_contexts",
    "resolve_config",
    "validate",
]
