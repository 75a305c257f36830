"""Tests for settings loading and the frozen signing configuration."""

from pathlib import Path

import pytest
from pydantic import ValidationError

from bulksign.config import DEFAULT_TIMESTAMP_SERVER, Settings, SigningConfig
from bulksign.errors import ConfigurationError


def _set_required(monkeypatch: pytest.MonkeyPatch, folder: Path) -> None:
    monkeypatch.setenv("BULKSIGN_FOLDER", str(folder))
    monkeypatch.setenv("BULKSIGN_CERTIFICATE", "cGZ4")
    monkeypatch.setenv("BULKSIGN_CERT_PASSWORD", "hunter2")
    monkeypatch.setenv("BULKSIGN_CERT_SHA1", "ABCDEF")


def test_settings_defaults(clean_env):
    settings = Settings()

    assert settings.folder == ""
    assert settings.recursive is False
    assert settings.timestamp_server == DEFAULT_TIMESTAMP_SERVER
    assert settings.max_attempts == 5
    assert settings.retry_delay_seconds == 1.0
    assert settings.github_actions is False
    assert settings.missing_required() == ["folder", "certificate", "cert-password", "cert-sha1"]


def test_settings_from_prefixed_environment(clean_env, temp_dir: Path):
    _set_required(clean_env, temp_dir)
    clean_env.setenv("BULKSIGN_RECURSIVE", "true")
    clean_env.setenv("BULKSIGN_MAX_ATTEMPTS", "3")
    clean_env.setenv("BULKSIGN_RETRY_DELAY_SECONDS", "0.25")

    config = SigningConfig.from_settings(Settings())

    assert config.folder == temp_dir
    assert config.recursive is True
    assert config.certificate.get_secret_value() == "cGZ4"
    assert config.cert_password.get_secret_value() == "hunter2"
    assert config.cert_sha1 == "ABCDEF"
    assert config.max_attempts == 3
    assert config.retry_delay_seconds == 0.25


def test_settings_from_action_inputs(clean_env, temp_dir: Path):
    clean_env.setenv("INPUT_FOLDER", str(temp_dir))
    clean_env.setenv("INPUT_RECURSIVE", "TRUE")
    clean_env.setenv("INPUT_CERTIFICATE", "cGZ4")
    clean_env.setenv("INPUT_CERT-PASSWORD", "hunter2")
    clean_env.setenv("INPUT_CERT-SHA1", "ABCDEF")
    clean_env.setenv("INPUT_TIMESTAMP-SERVER", "http://ts.example.test")
    clean_env.setenv("INPUT_CERT-DESCRIPTION", "Contoso Tools")
    clean_env.setenv("GITHUB_ACTIONS", "true")

    settings = Settings()
    config = SigningConfig.from_settings(settings)

    assert settings.github_actions is True
    assert config.recursive is True
    assert config.cert_sha1 == "ABCDEF"
    assert config.timestamp_server == "http://ts.example.test"
    assert config.cert_description == "Contoso Tools"


@pytest.mark.parametrize("raw", ["", "false", "no", "0", "anything"])
def test_recursive_flag_is_false_unless_truthy(clean_env, raw: str):
    clean_env.setenv("INPUT_RECURSIVE", raw)

    assert Settings().recursive is False


def test_missing_inputs_are_reported_individually(clean_env, temp_dir: Path):
    clean_env.setenv("BULKSIGN_FOLDER", str(temp_dir))
    clean_env.setenv("BULKSIGN_CERT_SHA1", "   ")
    clean_env.setenv("BULKSIGN_TIMESTAMP_SERVER", "")

    with pytest.raises(ConfigurationError) as excinfo:
        SigningConfig.from_settings(Settings())

    assert excinfo.value.missing == [
        "certificate",
        "cert-password",
        "cert-sha1",
        "timestamp-server",
    ]


def test_signing_config_is_frozen(signing_config):
    with pytest.raises(ValidationError):
        signing_config.max_attempts = 1


def test_signing_config_normalizes_extensions(make_signing_config, signing_tree):
    config = make_signing_config(signing_tree, extensions=["EXE", ".Dll"])

    assert config.extensions == frozenset({".exe", ".dll"})


def test_signing_config_rejects_zero_attempts(make_signing_config, signing_tree):
    with pytest.raises(ValidationError):
        make_signing_config(signing_tree, max_attempts=0)
