"""Ensure source credentials never reach log output."""

from __future__ import annotations

from cinevault.utils.redaction import redact_params, redact_secrets


def test_redacts_keyed_query_parameters() -> None:
    text = "https://www.omdbapi.com/?apikey=abc123&s=parasite and https://api.themoviedb.org/3/search/movie?api_key=xyz"
    redacted = redact_secrets(text)
    assert "abc123" not in redacted
    assert "xyz" not in redacted
    assert "s=parasite" in redacted


def test_redacts_connection_userinfo_and_proxy_keys() -> None:
    assert redact_secrets("redis://:supersecret@localhost:6379/0") == "redis://***@localhost:6379/0"
    assert redact_secrets("{'X-RapidAPI-Key': 'k-123', 'X-RapidAPI-Host': 'mdl'}") == (
        "{'X-RapidAPI-Key': '***', 'X-RapidAPI-Host': 'mdl'}"
    )
    assert redact_secrets("Authorization: Bearer abc.def") == "Authorization: Bearer ***"
    assert redact_secrets("") == ""


def test_redact_params_masks_credential_keys_only() -> None:
    assert redact_params({"api_key": "k", "query": "dark"}) == {"api_key": "***", "query": "dark"}
    assert redact_params(None) == {}
