"""Pytest configuration and fixtures.

Provides environment isolation, logging configuration and shared
configuration contexts. Isolation fixtures are autouse.
"""

from __future__ import annotations

from contextlib import suppress
import logging
import os
from pathlib import Path

import pytest

from manta.config import StandardConfigContext
from manta.models import EncryptionAuthenticationMode

# =============================================================================
# Environment Isolation (Autouse)
# =============================================================================


@pytest.fixture(autouse=True)
def block_dotenv(request, monkeypatch):
    """Prevent python-dotenv from loading project .env files during tests.

    Opt-out: @pytest.mark.allow_dotenv
    """
    if request.node.get_closest_marker("allow_dotenv"):
        return
    with suppress(Exception):
        monkeypatch.setattr(
            "dotenv.load_dotenv", lambda *_args, **_kwargs: False, raising=False
        )


@pytest.fixture(autouse=True)
def isolate_manta_env(request, monkeypatch, tmp_path):
    """Clear MANTA_* variables and point config files at an empty directory.

    Opt-out: @pytest.mark.allow_env_pollution
    """
    if request.node.get_closest_marker("allow_env_pollution"):
        return

    for key in list(os.environ.keys()):
        if key.startswith("MANTA_"):
            monkeypatch.delenv(key, raising=False)
    monkeypatch.setenv("MANTA_PYPROJECT_PATH", str(tmp_path / "no-pyproject.toml"))
    monkeypatch.setenv("MANTA_CONFIG_HOME", str(tmp_path / "no-home.toml"))


# =============================================================================
# Logging
# =============================================================================


@pytest.fixture(scope="session", autouse=True)
def quiet_noisy_libraries():
    """Suppress noisy third-party loggers."""
    logging.getLogger("urllib3").setLevel(logging.WARNING)


# =============================================================================
# Contexts
# =============================================================================


@pytest.fixture
def valid_context() -> StandardConfigContext:
    """A context that passes every rule with encryption disabled."""
    return StandardConfigContext(
        url="https://us-east.manta.joyent.com:443",
        user="alice",
        key_id="04:92:7b:23:bc:08:4f:d7:3b:5a:38:9e:4a:17:2e:df",
        key_path="/home/alice/.ssh/id_rsa",
        timeout=20_000,
        retries=3,
        max_connections=24,
        no_auth=False,
        client_encryption_enabled=False,
    )


@pytest.fixture
def encryption_key_file(tmp_path: Path) -> Path:
    """A readable private encryption key file."""
    path = tmp_path / "encryption.key"
    path.write_bytes(b"\x00" * 32)
    return path


@pytest.fixture
def encrypted_context(
    valid_context: StandardConfigContext, encryption_key_file: Path
) -> StandardConfigContext:
    """A valid context with client-side encryption enabled via a key file."""
    return valid_context.replace(
        client_encryption_enabled=True,
        encryption_key_id="my-key-1",
        encryption_authentication_mode=EncryptionAuthenticationMode.STRICT,
        permit_unencrypted_downloads=False,
        encryption_private_key_path=str(encryption_key_file),
    )
