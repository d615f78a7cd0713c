# src/manta/config/loaders.py

"""Configuration loaders for environment, mappings and files.

Loaders only extract raw values and translate setting keys to attribute
names; type coercion and validation happen in the core resolver. Each loader
returns a plain dictionary the resolver can merge.
"""

from __future__ import annotations

import base64
import binascii
import logging
import os
from typing import TYPE_CHECKING, Any

import tomllib

from manta.errors import ConfigurationError

from . import utils
from .schema import ATTRIBUTES, SemanticType, env_keys, setting_for

if TYPE_CHECKING:
    from collections.abc import Mapping
    from pathlib import Path

log = logging.getLogger(__name__)

CONFIG_TOOL_NAME = "manta"

_DOTENV_LOADED: bool = False


def _try_load_dotenv() -> None:
    """Load a .env file with python-dotenv once per process.

    Errors while loading are ignored so resolution stays predictable in
    minimal environments.
    """
    global _DOTENV_LOADED
    if _DOTENV_LOADED:
        return
    _DOTENV_LOADED = True
    try:
        from dotenv import load_dotenv

        load_dotenv()
    except Exception as e:  # noqa: BLE001
        log.debug("Skipping .env loading: %s", e)


def _decode_base64(key: str, value: Any) -> Any:
    if value is None or isinstance(value, bytes | bytearray):
        return value
    try:
        return base64.b64decode(str(value).strip(), validate=True)
    except (binascii.Error, ValueError) as e:
        from .validation import FailureCode, FailureReason

        reason = FailureReason(
            FailureCode.INVALID_VALUE, f"{key}: value is not valid base64", key
        )
        raise ConfigurationError(
            f"Configuration validation failed: {reason.message}",
            hint=utils.field_spec_hint(key),
            reasons=(reason,),
        ) from e


def normalize_keys(mapping: Mapping[str, Any]) -> dict[str, Any]:
    """Translate canonical keys, env aliases or attribute names to attributes.

    The base64 form of the encryption key is decoded to bytes here so every
    layer carries the same representation. Unrecognized keys are dropped.

    Raises:
        ConfigurationError: If a base64 value cannot be decoded.
    """
    out: dict[str, Any] = {}
    for key, value in mapping.items():
        setting = setting_for(key)
        if setting is None:
            if key in ATTRIBUTES:
                out[key] = value
            else:
                log.debug("Ignoring unrecognized configuration key %r", key)
            continue
        if setting.type is SemanticType.BASE64:
            value = _decode_base64(key, value)
        out[setting.attribute] = value
    return out


# --- Environment Loading ---


def load_env(environ: Mapping[str, str] | None = None) -> dict[str, Any]:
    """Load configuration from registered ``MANTA_*`` environment variables.

    Behavior:
    - When ``environ`` is None, a ``.env`` file is loaded first (if
      python-dotenv finds one) and ``os.environ`` is read.
    - Only aliases registered in the schema are read, so control variables
      such as ``MANTA_PROFILE`` never leak into settings.

    Returns:
        Raw string values keyed by attribute name.
    """
    if environ is None:
        _try_load_dotenv()
        environ = os.environ
    present = {key: environ[key] for key in env_keys() if key in environ}
    return normalize_keys(present)


# --- Profile and file loading helpers ---


def _read_toml(path: Path) -> dict[str, Any]:
    """Read a TOML file, returning an empty dict when missing or invalid."""
    if not path.exists():
        return {}
    try:
        with path.open("rb") as f:
            return tomllib.load(f)
    except (OSError, tomllib.TOMLDecodeError) as e:
        log.debug("Ignoring unreadable config file %s: %s", path, e)
        return {}


def _flatten(table: Mapping[str, Any], prefix: str = "") -> dict[str, Any]:
    """Join nested TOML tables back into dotted keys (``manta.url``)."""
    out: dict[str, Any] = {}
    for key, value in table.items():
        name = f"{prefix}{key}"
        if isinstance(value, dict) and setting_for(name) is None:
            out.update(_flatten(value, f"{name}."))
        else:
            out[name] = value
    return out


def _extract_tables(data: dict[str, Any], profile: str | None) -> dict[str, Any]:
    """Extract ``[tool.manta]`` and overlay ``[tool.manta.profiles.<name>]``."""
    section = data.get("tool", {}).get(CONFIG_TOOL_NAME, {})
    config = _flatten({k: v for k, v in section.items() if k != "profiles"})
    if profile:
        overlay = section.get("profiles", {}).get(profile, {})
        config.update(_flatten(overlay))
    return config


def _load_config_file(path: Path, profile: str | None = None) -> dict[str, Any]:
    data = _read_toml(path)
    effective_profile = profile or utils.get_effective_profile()
    return normalize_keys(_extract_tables(data, effective_profile))


def list_profiles() -> list[str]:
    """List profile names available in home and project TOML files."""
    names: set[str] = set()
    for path in (utils.get_pyproject_path(), utils.get_home_config_path()):
        data = _read_toml(path)
        profiles = data.get("tool", {}).get(CONFIG_TOOL_NAME, {}).get("profiles", {})
        names.update(name for name in profiles if isinstance(name, str) and name)
    return sorted(names)


def load_pyproject(profile: str | None = None) -> dict[str, Any]:
    """Load ``[tool.manta]`` from pyproject.toml in the working directory."""
    return _load_config_file(utils.get_pyproject_path(), profile)


def load_home(profile: str | None = None) -> dict[str, Any]:
    """Load ``[tool.manta]`` from the user's ``~/.config/manta.toml``."""
    return _load_config_file(utils.get_home_config_path(), profile)
