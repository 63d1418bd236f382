"""Shared pytest fixtures for the full ElevenLabs TTS test suite."""

from __future__ import annotations

import pytest

_PROVIDER_ENV_KEYS = (
    "ELEVENLABS_API_KEY",
    "ELEVENLABS_VOICE_ID",
    "ELEVENLABS_MODEL_ID",
    "ELEVENLABS_OUTPUT_FORMAT",
    "ELEVENLABS_BASE_URL",
)


@pytest.fixture(autouse=True)
def _clear_provider_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep developer `ELEVENLABS_*` variables out of provider construction."""

    for env_key in _PROVIDER_ENV_KEYS:
        monkeypatch.delenv(env_key, raising=False)
