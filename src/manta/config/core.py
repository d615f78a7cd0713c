# src/manta/config/core.py

"""Layered resolution of the Manta client configuration.

Resolution follows defaults < home file < project file < environment <
overrides. Raw layer values are merged first, then coerced once through the
pydantic ``Settings`` model into an immutable ``StandardConfigContext``, which
is validated before being handed to the client.
"""

from __future__ import annotations

from contextlib import suppress
from dataclasses import dataclass
from enum import Enum
import logging
import os
from typing import TYPE_CHECKING, Any, Literal, overload
import warnings

from pydantic import BaseModel, SecretStr, ValidationError, field_validator

from manta.errors import ConfigurationError
from manta.models import EncryptionAuthenticationMode
from manta.result import Failure

from . import validation
from .context import StandardConfigContext, defaults_context, overlay
from .diagnostics import to_redacted_dict
from .lookup import redacted_lookup
from .schema import ATTRIBUTES, SETTINGS, primary_setting
from .utils import ENV_PREFIX, REDACTED, should_emit_debug

if TYPE_CHECKING:
    from collections.abc import Mapping

log = logging.getLogger(__name__)

# --- Schema (Pydantic wall) ---

_SCALAR_FIELDS = (
    "timeout",
    "retries",
    "max_connections",
    "http_buffer_size",
    "tcp_socket_timeout",
    "upload_buffer_size",
    "no_auth",
    "disable_native_signatures",
    "verify_uploads",
    "client_encryption_enabled",
    "permit_unencrypted_downloads",
    "encryption_authentication_mode",
)


class Settings(BaseModel):
    """Coercion schema for raw layer values.

    Only types are enforced here; cross-field rules live in the validator so
    every problem is reported together.
    """

    url: str | None = None
    user: str | None = None
    key_id: str | None = None
    key_path: str | None = None
    timeout: int | None = None
    retries: int | None = None
    max_connections: int | None = None
    private_key_content: SecretStr | None = None
    password: SecretStr | None = None
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

    # Rejected inputs are kept out of pydantic error text.
    model_config = {
        "extra": "ignore",
        "frozen": True,
        "hide_input_in_errors": True,
    }

    @field_validator(*_SCALAR_FIELDS, mode="before")
    @classmethod
    def blank_to_none(cls, v: Any) -> Any:
        """Trim strings for numeric, boolean and enum settings; blank means unset."""
        if isinstance(v, str):
            v = v.strip()
            return v or None
        return v

    @field_validator("https_protocols", "https_cipher_suites", mode="before")
    @classmethod
    def join_lists(cls, v: Any) -> Any:
        """Accept sequences for the comma separated TLS lists."""
        if isinstance(v, list | tuple):
            return ",".join(str(item).strip() for item in v)
        return v

    @field_validator("encryption_authentication_mode", mode="before")
    @classmethod
    def normalize_auth_mode(cls, v: Any) -> Any:
        return EncryptionAuthenticationMode.parse(v)

    @field_validator("encryption_private_key_bytes", mode="before")
    @classmethod
    def normalize_key_bytes(cls, v: Any) -> Any:
        if isinstance(v, bytearray):
            return bytes(v)
        return v


def coerce_settings(raw: Mapping[str, Any]) -> dict[str, Any]:
    """Coerce raw attribute values to their setting types.

    Raises:
        ConfigurationError: Listing every value that failed to coerce.
    """
    try:
        settings = Settings.model_validate(dict(raw))
    except ValidationError as e:
        reasons = []
        for err in e.errors():
            attribute = str(err["loc"][0]) if err["loc"] else "configuration"
            key = attribute
            if attribute in ATTRIBUTES:
                key = primary_setting(attribute).key
            reasons.append(
                validation.FailureReason(
                    validation.FailureCode.INVALID_VALUE,
                    f"{key}: {err['msg']}",
                    key,
                )
            )
        lines = "\n".join(r.message for r in reasons)
        raise ConfigurationError(
            f"Configuration validation failed:\n{lines}",
            hint="Check the types of the settings listed above.",
            reasons=reasons,
        ) from e

    # Unwrap SecretStr -> plain string for the runtime context
    data = settings.model_dump()
    for name in ("private_key_content", "password"):
        secret = data[name]
        if isinstance(secret, SecretStr):
            data[name] = secret.get_secret_value()
    return data


# --- Audit types ---


class Origin(str, Enum):
    """Source origin for configuration field values."""

    DEFAULT = "default"
    HOME = "home"
    PROJECT = "project"
    ENV = "env"
    OVERRIDES = "overrides"


@dataclass(frozen=True)
class FieldOrigin:
    """Tracks the origin and context of a configuration field value."""

    origin: Origin
    env_key: str | None = None  # e.g., "MANTA_URL"
    file: str | None = None  # e.g., "~/.config/manta.toml"


SourceMap = dict[str, FieldOrigin]


# --- Public resolution API ---


@overload
def resolve_config(
    overrides: Mapping[str, Any] | None = ...,
    *,
    environ: Mapping[str, str] | None = ...,
    profile: str | None = ...,
    explain: Literal[True],
    validate: bool = ...,
) -> tuple[StandardConfigContext, SourceMap]: ...


@overload
def resolve_config(
    overrides: Mapping[str, Any] | None = ...,
    *,
    environ: Mapping[str, str] | None = ...,
    profile: str | None = ...,
    explain: Literal[False] = ...,
    validate: bool = ...,
) -> StandardConfigContext: ...


def resolve_config(
    overrides: Mapping[str, Any] | None = None,
    *,
    environ: Mapping[str, str] | None = None,
    profile: str | None = None,
    explain: bool = False,
    validate: bool = True,
) -> StandardConfigContext | tuple[StandardConfigContext, SourceMap]:
    """Resolve configuration from all sources into a ``StandardConfigContext``.

    Args:
        overrides: Programmatic values keyed by canonical key, env alias or
            attribute name. None values never override lower layers.
        environ: Environment to read instead of ``os.environ`` (skips .env).
        profile: Profile name overlaid from the TOML files.
        explain: If True, also return the per-field ``SourceMap``.
        validate: Run the consistency rules before returning.

    Returns:
        The context, or ``(context, source_map)`` when ``explain`` is True.

    Raises:
        ConfigurationError: If a value cannot be coerced or, with
            ``validate``, if any consistency rule fails.
    """
    from . import utils as _utils
    from .loaders import load_env, load_home, load_pyproject, normalize_keys

    effective_profile = (
        profile if profile is not None else _utils.get_effective_profile()
    )

    merged, sources = _resolve_layers(
        overrides=normalize_keys(overrides or {}),
        env=load_env(environ),
        project=load_pyproject(profile=effective_profile),
        home=load_home(profile=effective_profile),
    )
    context = StandardConfigContext(**coerce_settings(merged))
    log.debug("Resolved Manta configuration: %s", summarize_origins(sources))

    if validate:
        validation.validate(context)

    if not explain and should_emit_debug():
        with suppress(Exception):
            warnings.warn(
                "Config audit (redacted)\n" + audit_text(context, sources),
                stacklevel=2,
            )

    return (context, sources) if explain else context


def _resolve_layers(
    *,
    overrides: Mapping[str, Any],
    env: Mapping[str, Any],
    project: Mapping[str, Any],
    home: Mapping[str, Any],
) -> tuple[dict[str, Any], SourceMap]:
    """Merge layers with last-wins precedence and record each field's origin."""
    from .utils import get_home_config_path, get_pyproject_path

    defaults = defaults_context()
    layers = [
        (Origin.DEFAULT, {a: getattr(defaults, a) for a in ATTRIBUTES}),
        (Origin.HOME, home),
        (Origin.PROJECT, project),
        (Origin.ENV, env),
        (Origin.OVERRIDES, overrides),
    ]

    out: dict[str, Any] = {}
    src: SourceMap = {}
    for origin, payload in layers:
        for cleared in overlay(out, payload):
            src.pop(cleared, None)
        for k, v in payload.items():
            if v is None:
                continue
            hints: dict[str, str] = {}
            if origin is Origin.ENV:
                env_key = primary_setting(k).env_key
                if k == "encryption_private_key_bytes":
                    env_key = "MANTA_ENCRYPTION_KEY_BYTES"
                if env_key:
                    hints["env_key"] = env_key
            elif origin is Origin.PROJECT:
                hints["file"] = str(get_pyproject_path())
            elif origin is Origin.HOME:
                hints["file"] = str(get_home_config_path())
            src[k] = FieldOrigin(origin=origin, **hints)
    return out, src


# --- Minimal audit helpers ---


def _origin_label(where: FieldOrigin) -> str:
    match where.origin:
        case Origin.ENV:
            return f"env:{where.env_key}"
        case Origin.PROJECT | Origin.HOME:
            return f"file:{where.file}"
        case _:
            return str(where.origin.value)


def audit_lines(context: StandardConfigContext, sources: SourceMap) -> list[str]:
    """Produce redacted, human-readable audit lines per setting.

    Only origins are shown; values of sensitive settings are never printed.
    """
    lines: list[str] = []
    for attribute in ATTRIBUTES:
        fo = sources.get(attribute)
        if fo is None:
            continue
        setting = primary_setting(attribute)
        redaction = " [REDACTED]" if setting.sensitive else ""
        lines.append(f"{setting.key}: {_origin_label(fo)}{redaction}")
    lines.append("manta.home_directory: derived:manta.user")
    return lines


def audit_text(context: StandardConfigContext, sources: SourceMap) -> str:
    """Format audit as a single string suitable for printing/logging."""
    return "\n".join(audit_lines(context, sources))


def summarize_origins(sources: SourceMap) -> dict[str, int]:
    """Count how many fields originated from each layer."""
    counts: dict[str, int] = {}
    for fo in sources.values():
        key = fo.origin.value
        counts[key] = counts.get(key, 0) + 1
    return counts


def audit_layers_summary(src: SourceMap) -> list[str]:
    """Human-friendly summary of layer counts in fixed order."""
    counts = summarize_origins(src)
    return [f"{o.value:9s}: {counts.get(o.value, 0)} fields" for o in Origin]


def was_field_overridden(sources: SourceMap, field: str) -> bool:
    """Return True if a field's value did not come from defaults."""
    fo = sources.get(field)
    return bool(fo and fo.origin is not Origin.DEFAULT)


def check_environment(environ: Mapping[str, str] | None = None) -> dict[str, str]:
    """Return current ``MANTA_*`` variables with secret values redacted."""
    environ = os.environ if environ is None else environ
    sensitive = {s.env_key for s in SETTINGS if s.sensitive and s.env_key}
    return {
        k: REDACTED if k in sensitive else v
        for k, v in environ.items()
        if k.startswith(ENV_PREFIX)
    }


# --- Minimal CLI entrypoint ---


def main(argv: list[str] | None = None) -> int:
    """``manta-config`` command: inspect the resolved configuration."""
    import argparse
    import json
    import sys

    parser = argparse.ArgumentParser("manta-config")
    parser.add_argument("--profile", default=None)
    sub = parser.add_subparsers(dest="cmd", required=True)
    sub.add_parser("show")
    sub.add_parser("audit")
    sub.add_parser("validate")
    sub.add_parser("env")
    get = sub.add_parser("get")
    get.add_argument("key")
    args = parser.parse_args(argv)

    try:
        context, src = resolve_config(
            profile=args.profile, explain=True, validate=False
        )
    except ConfigurationError as e:
        sys.stderr.write(f"{e}\n")
        return 1

    if args.cmd == "show":
        sys.stdout.write(json.dumps(to_redacted_dict(context), indent=2) + "\n")
    elif args.cmd == "audit":
        sys.stdout.write(audit_text(context, src) + "\n")
        for line in audit_layers_summary(src):
            sys.stdout.write(line + "\n")
    elif args.cmd == "validate":
        result = validation.check(context)
        if isinstance(result, Failure):
            sys.stderr.write(f"{result.error}\n")
            return 1
        sys.stdout.write("Configuration is valid.\n")
    elif args.cmd == "env":
        for k, v in sorted(check_environment().items()):
            sys.stdout.write(f"{k}={v}\n")
    elif args.cmd == "get":
        value = redacted_lookup(args.key, context)
        if isinstance(value, Enum):
            value = value.value
        sys.stdout.write(f"{'' if value is None else value}\n")
    return 0


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
