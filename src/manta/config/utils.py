# src/manta/config/utils.py

"""Configuration utilities and shared functionality.

This module contains pure helpers that can be imported without creating
circular dependencies: account parsing, home directory derivation, config
file locations and the debug toggle.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import TYPE_CHECKING, Literal

if TYPE_CHECKING:
    from collections.abc import Callable

# --- Constants ---

ENV_PREFIX = "MANTA_"

CONFIG_HOME_VAR = "MANTA_CONFIG_HOME"
PYPROJECT_PATH_VAR = "MANTA_PYPROJECT_PATH"
PROFILE_VAR = "MANTA_PROFILE"
DEBUG_CONFIG_VAR = "MANTA_DEBUG_CONFIG"

SUBUSER_DELIMITER = "/"

REDACTED = "***redacted***"

# --- Account Utilities ---


def parse_account(user: str) -> tuple[str, ...]:
    """Split an ``account/subuser`` identifier into its parts.

    Only the first delimiter separates the account from the subuser, so a
    plain account name yields a single element.
    """
    return tuple(user.split(SUBUSER_DELIMITER, 1))


def derive_home_directory(user: str | None) -> str | None:
    """Return ``/<account>`` for a Manta user, or None when user is None.

    >>> derive_home_directory("alice/subuser")
    '/alice'
    """
    if user is None:
        return None
    return f"/{parse_account(user)[0]}"


# --- Path Utilities ---


def get_config_path(path_type: Literal["project", "home"]) -> Path:
    """Get configuration file path with environment override support.

    Falls back to a cwd-based path for the "home" type when Path.home()
    cannot be resolved.
    """
    specs: dict[str, tuple[str, Callable[[], Path]]] = {
        "project": (
            PYPROJECT_PATH_VAR,
            lambda: Path.cwd() / "pyproject.toml",
        ),
        "home": (
            CONFIG_HOME_VAR,
            lambda: Path.home() / ".config" / "manta.toml",
        ),
    }
    env_var, default_factory = specs[path_type]
    if override := os.environ.get(env_var):
        return Path(override)
    try:
        return default_factory()
    except RuntimeError:
        if path_type == "home":
            return Path.cwd() / "manta.toml"
        raise


def get_pyproject_path() -> Path:
    """Return path to project pyproject.toml."""
    return get_config_path("project")


def get_home_config_path() -> Path:
    """Return path to user's home-level config TOML."""
    return get_config_path("home")


def default_key_path() -> str:
    """Default private signing key location (``~/.ssh/id_rsa``)."""
    try:
        return str(Path.home() / ".ssh" / "id_rsa")
    except RuntimeError:
        return str(Path(".ssh") / "id_rsa")


# --- Environment Utilities ---


def get_effective_profile() -> str | None:
    """Return the profile named by MANTA_PROFILE, if any."""
    return os.environ.get(PROFILE_VAR) or None


def should_emit_debug() -> bool:
    """Return True when debug audit is enabled via environment.

    Stateless for thread-safety; the warnings machinery already prints once
    per location.
    """
    return os.environ.get(DEBUG_CONFIG_VAR, "").strip().lower() in {
        "1",
        "true",
        "yes",
        "on",
    }


def field_spec_hint(key: str) -> str:
    """Return a compact hint for setting a config key via env or files."""
    from .schema import setting_for

    setting = setting_for(key)
    if setting is None:
        return f"Unknown setting {key!r}."
    env_part = f"Set {setting.env_key} or " if setting.env_key else "Set "
    return (
        f"{env_part}[tool.manta] {setting.key!r} in pyproject.toml "
        "(or ~/.config/manta.toml)."
    )
