"""Integration-test fixtures that keep the suite off the real ElevenLabs API."""

from __future__ import annotations

from typing import Any

import pytest


@pytest.fixture(autouse=True)
def _block_unmocked_http(monkeypatch: pytest.MonkeyPatch) -> None:
    """Fail loudly when a test reaches the HTTP layer without a recording transport."""

    def _unexpected_request(url: str, **kwargs: Any) -> None:
        _ = kwargs
        raise AssertionError(f"Unexpected HTTP request to {url}")

    monkeypatch.setattr("elevenlabs_tts.api.client.requests.get", _unexpected_request)
    monkeypatch.setattr("elevenlabs_tts.api.client.requests.post", _unexpected_request)
