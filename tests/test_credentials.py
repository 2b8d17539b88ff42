"""Tests for per-provider credential resolution."""

import pytest

from ezarg.credentials import bearer_token, resolve, supplied_credential
from ezarg.errors import MissingCredential
from ezarg.models import ProviderId


def test_supplied_key_wins_over_default():
    defaults = {ProviderId.CLAUDE: "default-key"}
    assert resolve(ProviderId.CLAUDE, "user-key", defaults) == "user-key"


@pytest.mark.parametrize("supplied", [None, "", "   "])
def test_blank_supplied_key_falls_back_to_default(supplied):
    defaults = {ProviderId.GROK: "default-key"}
    assert resolve(ProviderId.GROK, supplied, defaults) == "default-key"


def test_resolution_does_not_mutate_defaults():
    defaults = {ProviderId.GROK: "default-key"}
    resolve(ProviderId.GROK, "user-key", defaults)
    assert defaults == {ProviderId.GROK: "default-key"}


def test_missing_key_raises_missing_credential():
    with pytest.raises(MissingCredential) as excinfo:
        resolve(ProviderId.PERPLEXITY, None, {ProviderId.PERPLEXITY: ""})

    assert excinfo.value.provider == ProviderId.PERPLEXITY
    outcome = excinfo.value.to_outcome()
    assert outcome.kind == "MissingCredential"
    assert outcome.display == "Perplexity: API key is required"


def test_defaults_are_read_from_environment(monkeypatch):
    monkeypatch.setenv("OPENAI_API_KEY", "env-key")

    assert resolve(ProviderId.CHATGPT) == "env-key"
    with pytest.raises(MissingCredential):
        resolve(ProviderId.CLAUDE)


@pytest.mark.parametrize(
    "header, expected",
    [
        ("Bearer abc123", "abc123"),
        ("bearer  abc123 ", "abc123"),
        ("Basic abc123", None),
        ("Bearer ", None),
        (None, None),
    ],
)
def test_bearer_token(header, expected):
    assert bearer_token(header) == expected


def test_header_credential_takes_priority_over_body():
    assert supplied_credential("Bearer header-key", "body-key") == "header-key"
    assert supplied_credential(None, "body-key") == "body-key"
    assert supplied_credential("Bearer ", "") is None
