"""Tests for configuration loading and the persisted provider selection."""

import json

import pytest

from ezarg.config import (
    DEFAULT_PROVIDERS,
    credentials_from_env,
    load_provider_config,
    parse_providers,
    save_provider_config,
)
from ezarg.models import ProviderId


def test_defaults_when_config_file_missing(tmp_path):
    providers = load_provider_config(str(tmp_path / "missing.json"))
    assert [p.value for p in providers] == DEFAULT_PROVIDERS


def test_save_and_load_round_trip(tmp_path):
    config_file = tmp_path / "data" / "ezarg_config.json"
    path = str(config_file)

    saved = save_provider_config(["grok", "claude", "grok"], path)

    assert saved == [ProviderId.GROK, ProviderId.CLAUDE]
    assert json.loads(config_file.read_text()) == {"providers": ["grok", "claude"]}
    assert load_provider_config(path) == [ProviderId.GROK, ProviderId.CLAUDE]


def test_corrupt_config_falls_back_to_defaults(tmp_path):
    path = tmp_path / "ezarg_config.json"
    path.write_text("{not json")

    assert load_provider_config(str(path)) == list(ProviderId)


def test_unknown_provider_rejected(tmp_path):
    with pytest.raises(ValueError, match="Unknown provider 'gemini'"):
        save_provider_config(["claude", "gemini"], str(tmp_path / "c.json"))


def test_empty_selection_rejected(tmp_path):
    with pytest.raises(ValueError):
        save_provider_config([], str(tmp_path / "c.json"))


def test_parse_providers_keeps_order():
    assert parse_providers(["perplexity", "chatgpt"]) == [ProviderId.PERPLEXITY, ProviderId.CHATGPT]


def test_credentials_from_env(monkeypatch):
    monkeypatch.setenv("GROK_API_KEY", "xai-key")

    credentials = credentials_from_env()

    assert credentials[ProviderId.GROK] == "xai-key"
    assert credentials[ProviderId.CLAUDE] is None
    assert set(credentials) == set(ProviderId)
