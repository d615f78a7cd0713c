"""Setting schema catalogue tests."""

from __future__ import annotations

import dataclasses

import pytest

from manta.config import SETTINGS, SemanticType, canonical_keys, env_keys, setting_for
from manta.config.context import ConfigContext, StandardConfigContext
from manta.config.schema import ATTRIBUTES, primary_setting

pytestmark = pytest.mark.unit


def test_canonical_and_env_keys_resolve_to_same_setting() -> None:
    for setting in SETTINGS:
        assert setting_for(setting.key) is setting
        if setting.env_key is not None:
            assert setting_for(setting.env_key) is setting


def test_keys_are_unique_across_both_catalogues() -> None:
    names = list(canonical_keys()) + list(env_keys())
    assert len(names) == len(set(names))


def test_unknown_key_has_no_setting() -> None:
    assert setting_for("manta.nope") is None
    assert setting_for("") is None


@pytest.mark.parametrize(
    ("key", "env_key", "attribute"),
    [
        ("manta.url", "MANTA_URL", "url"),
        ("manta.user", "MANTA_USER", "user"),
        ("manta.key_id", "MANTA_KEY_ID", "key_id"),
        ("manta.retries", "MANTA_HTTP_RETRIES", "retries"),
        ("manta.max_connections", "MANTA_MAX_CONNS", "max_connections"),
        ("https.cipherSuites", "MANTA_HTTPS_CIPHERS", "https_cipher_suites"),
        ("manta.no_auth", "MANTA_NO_AUTH", "no_auth"),
        ("manta.client_encryption", "MANTA_CLIENT_ENCRYPTION", "client_encryption_enabled"),
        (
            "manta.encryption_key_id",
            "MANTA_CLIENT_ENCRYPTION_KEY_ID",
            "encryption_key_id",
        ),
    ],
)
def test_stable_key_names(key: str, env_key: str, attribute: str) -> None:
    setting = setting_for(key)
    assert setting is not None
    assert setting.env_key == env_key
    assert setting.attribute == attribute


def test_key_bytes_have_raw_and_base64_forms() -> None:
    raw = setting_for("manta.encryption_key_bytes")
    text = setting_for("manta.encryption_key_bytes_base64")
    assert raw is not None and text is not None
    assert raw.type is SemanticType.BYTES
    assert raw.env_key is None
    assert text.type is SemanticType.BASE64
    assert text.env_key == "MANTA_ENCRYPTION_KEY_BYTES"
    assert raw.attribute == text.attribute == "encryption_private_key_bytes"


def test_secrets_are_flagged_sensitive() -> None:
    sensitive = {s.key for s in SETTINGS if s.sensitive}
    assert sensitive == {
        "manta.key_content",
        "manta.password",
        "manta.encryption_key_bytes",
        "manta.encryption_key_bytes_base64",
    }


def test_every_attribute_is_a_context_field() -> None:
    fields = {f.name for f in dataclasses.fields(StandardConfigContext)}
    assert set(ATTRIBUTES) == fields
    for attribute in ATTRIBUTES:
        assert hasattr(ConfigContext, attribute)


def test_home_directory_is_not_settable() -> None:
    assert "home_directory" not in ATTRIBUTES
    with pytest.raises(KeyError):
        primary_setting("home_directory")


def test_settings_are_immutable() -> None:
    with pytest.raises(dataclasses.FrozenInstanceError):
        SETTINGS[0].key = "other"  # type: ignore[misc]
