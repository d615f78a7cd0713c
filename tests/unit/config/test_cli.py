"""``manta-config`` command tests."""

from __future__ import annotations

import json

import pytest

from manta.config.core import main

pytestmark = pytest.mark.unit


@pytest.fixture
def configured_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("MANTA_USER", "alice/bob")
    monkeypatch.setenv("MANTA_KEY_ID", "aa:bb")
    monkeypatch.setenv("MANTA_PASSWORD", "hunter2")


@pytest.mark.usefixtures("configured_env")
def test_show_prints_redacted_json(capsys: pytest.CaptureFixture[str]) -> None:
    assert main(["show"]) == 0
    data = json.loads(capsys.readouterr().out)
    assert data["manta.user"] == "alice/bob"
    assert data["manta.password"] == "***redacted***"
    assert data["manta.home_directory"] == "/alice"


@pytest.mark.usefixtures("configured_env")
def test_audit_prints_origins_and_layer_counts(
    capsys: pytest.CaptureFixture[str],
) -> None:
    assert main(["audit"]) == 0
    out = capsys.readouterr().out
    assert "manta.user: env:MANTA_USER" in out
    assert "manta.password: env:MANTA_PASSWORD [REDACTED]" in out
    assert "env      : 3 fields" in out
    assert "hunter2" not in out


@pytest.mark.usefixtures("configured_env")
def test_validate_success(capsys: pytest.CaptureFixture[str]) -> None:
    assert main(["validate"]) == 0
    assert "Configuration is valid." in capsys.readouterr().out


def test_validate_failure_lists_every_reason(
    capsys: pytest.CaptureFixture[str],
) -> None:
    assert main(["validate"]) == 1
    err = capsys.readouterr().err
    assert "Errors when loading Manta SDK configuration:" in err
    assert "Manta account name must be specified" in err


def test_unparseable_value_exits_nonzero(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    monkeypatch.setenv("MANTA_TIMEOUT", "soon")
    assert main(["show"]) == 1
    assert "manta.timeout" in capsys.readouterr().err


@pytest.mark.usefixtures("configured_env")
def test_env_redacts_secret_variables(capsys: pytest.CaptureFixture[str]) -> None:
    assert main(["env"]) == 0
    out = capsys.readouterr().out
    assert "MANTA_USER=alice/bob" in out
    assert "MANTA_PASSWORD=***redacted***" in out


@pytest.mark.usefixtures("configured_env")
@pytest.mark.parametrize(
    ("key", "expected"),
    [
        ("MANTA_USER", "alice/bob"),
        ("manta.timeout", "20000"),
        ("manta.encryption_auth_mode", "Strict"),
        ("manta.password", "***redacted***"),
        ("manta.nope", ""),
    ],
)
def test_get_single_key(
    key: str, expected: str, capsys: pytest.CaptureFixture[str]
) -> None:
    assert main(["get", key]) == 0
    assert capsys.readouterr().out == f"{expected}\n"
