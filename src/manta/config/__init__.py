# src/manta/config/__init__.py

"""Configuration for the Manta client.

The core principle is resolve-once, validate, then hand over: layered sources
are merged into an immutable ``StandardConfigContext`` that must pass
``validate`` before a client is constructed.

Key exports:
- resolve_config: Layered resolution (defaults < files < env < overrides)
- ConfigContext: Read-only capability every configuration source satisfies
- validate / check: Consistency rules with structured failure reasons
- lookup: Generic access by canonical key or environment alias
- describe: Redacted rendering safe for logs
"""

# ruff: noqa: I001

from .schema import (
    SETTINGS,
    SemanticType,
    Setting,
    canonical_keys,
    env_keys,
    setting_for,
)
from .context import (
    ConfigContext,
    StandardConfigContext,
    defaults_context,
    merge_contexts,
    snapshot,
)
from .lookup import lookup, lookup_many, redacted_lookup
from .validation import (
    FailureCode,
    FailureReason,
    check,
    collect_failures,
    validate,
)
from .diagnostics import describe, error_context, to_redacted_dict
from .utils import derive_home_directory, parse_account
from .core import (
    FieldOrigin,
    Origin,
    Settings,
    SourceMap,
    audit_layers_summary,
    audit_lines,
    audit_text,
    check_environment,
    resolve_config,
    summarize_origins,
    was_field_overridden,
)
from .loaders import list_profiles, load_env

__all__ = [  # noqa: RUF022
    # Main public API
    "resolve_config",
    "validate",
    "check",
    "collect_failures",
    "lookup",
    "describe",
    "derive_home_directory",
    # Contexts
    "ConfigContext",
    "StandardConfigContext",
    "defaults_context",
    "merge_contexts",
    "snapshot",
    # Schema
    "SETTINGS",
    "Setting",
    "SemanticType",
    "Settings",
    "canonical_keys",
    "env_keys",
    "setting_for",
    # Failures
    "FailureCode",
    "FailureReason",
    # Redacted views & audit
    "error_context",
    "to_redacted_dict",
    "redacted_lookup",
    "lookup_many",
    "Origin",
    "FieldOrigin",
    "SourceMap",
    "audit_lines",
    "audit_text",
    "audit_layers_summary",
    "summarize_origins",
    "was_field_overridden",
    "check_environment",
    # Advanced utilities
    "parse_account",
    "list_profiles",
    "load_env",
]
