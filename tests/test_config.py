"""Tests for environment-driven settings."""

import pytest
from pydantic import ValidationError

from chessledger.config import Settings, is_test_mode, load_settings


def test_defaults():
    settings = load_settings(env={})
    assert settings == Settings()
    assert settings.history.window == 5
    assert settings.store.api_token is None


def test_env_overrides():
    settings = load_settings(env={
        "CHESSLEDGER_STORE__URL": "https://store.example",
        "CHESSLEDGER_STORE__API_TOKEN": "jwt",
        "CHESSLEDGER_LEDGER__URL": "https://rpc.example",
        "CHESSLEDGER_HISTORY__WINDOW": "10",
        "CHESSLEDGER_NODE__LEDGER_PORT": "9400",
    })
    assert settings.store.url == "https://store.example"
    assert settings.store.api_token == "jwt"
    assert settings.ledger.url == "https://rpc.example"
    assert settings.history.window == 10
    assert settings.node.ledger_port == 9400


def test_unrelated_variables_ignored():
    settings = load_settings(env={
        "PATH": "/usr/bin",
        "CHESSLEDGER_TEST_MODE": "1",
        "CHESSLEDGER_UNKNOWN__THING": "x",
        "OTHER_STORE__URL": "nope",
    })
    assert settings == Settings()


def test_invalid_value_raises():
    with pytest.raises(ValidationError):
        load_settings(env={"CHESSLEDGER_HISTORY__WINDOW": "-1"})
    with pytest.raises(ValidationError):
        load_settings(env={"CHESSLEDGER_STORE__TIMEOUT": "soon"})


def test_test_mode_flag():
    assert is_test_mode({"CHESSLEDGER_TEST_MODE": "true"})
    assert not is_test_mode({})
