"""Integration tests for batch and streaming synthesis through the HTTP layer."""

from __future__ import annotations

from typing import Any

import pytest

from elevenlabs_tts.api.client import ElevenLabsProviderError
from elevenlabs_tts.errors import ConfigurationError, VoiceRequiredError
from elevenlabs_tts.models.datatypes import TTSOptions
from elevenlabs_tts.tts.provider import ElevenLabsTTSProvider
from tests.fakes import MockResponse, RecordingTransport, capture_logger, json_response

_BASE_URL = "https://api.elevenlabs.io/v1"


def _provider(**settings: Any) -> tuple[ElevenLabsTTSProvider, Any]:
    run_logger, buffer = capture_logger()
    explicit = {"api_key": "sk_integrationkey123", **settings}
    return ElevenLabsTTSProvider(explicit, env={}, run_logger=run_logger), buffer


def test_directive_speed_drives_body_and_duration(monkeypatch: pytest.MonkeyPatch) -> None:
    """A first-line directive should be stripped and its speed used for the estimate."""

    transport = RecordingTransport(MockResponse(content=b"PCMDATA"))
    monkeypatch.setattr("elevenlabs_tts.api.client.requests.post", transport)
    provider, _ = _provider(default_voice_id="v1")

    result = provider.synthesize('{"speed":0.5}\nSay this')

    url, kwargs = transport.calls[0]
    assert url == f"{_BASE_URL}/text-to-speech/v1"
    assert kwargs["json"]["text"] == "Say this"
    assert kwargs["params"] == {"output_format": "pcm_44100"}
    assert result.audio == b"PCMDATA"
    assert result.duration_ms == 1600.0
    assert result.format == "pcm_s16le"
    assert result.sample_rate == 44100


def test_request_body_uses_config_defaults_and_omits_unset_members(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    """Voice settings should come from defaults and unset members should be absent."""

    transport = RecordingTransport(MockResponse(content=b"a"))
    monkeypatch.setattr("elevenlabs_tts.api.client.requests.post", transport)
    provider, _ = _provider(default_voice_id="config-voice")

    provider.synthesize("Hello world")

    url, kwargs = transport.calls[0]
    assert url.endswith("/text-to-speech/config-voice")
    assert kwargs["json"] == {
        "text": "Hello world",
        "model_id": "eleven_turbo_v2_5",
        "voice_settings": {
            "stability": 0.5,
            "similarity_boost": 0.75,
            "use_speaker_boost": True,
        },
    }


def test_directive_overrides_options_field_by_field(monkeypatch: pytest.MonkeyPatch) -> None:
    """Directive values should win per field while options fill the gaps."""

    transport = RecordingTransport(MockResponse(content=b"a"))
    monkeypatch.setattr("elevenlabs_tts.api.client.requests.post", transport)
    provider, _ = _provider()

    provider.synthesize(
        '{"voiceId":"dv","model":"eleven_v3","stability":0.75,"seed":12.7,"lang":"de"}\nHallo',
        {"voice": "ov", "style": 0.2, "latencyTier": 3, "outputFormat": "mp3_44100_64"},
    )

    url, kwargs = transport.calls[0]
    body = kwargs["json"]
    assert url.endswith("/text-to-speech/dv")
    assert body["model_id"] == "eleven_v3"
    assert body["voice_settings"]["stability"] == 0.5
    assert body["voice_settings"]["style"] == 0.2
    assert body["seed"] == 12
    assert body["language_code"] == "de"
    assert kwargs["params"] == {
        "output_format": "mp3_44100_64",
        "optimize_streaming_latency": "3",
    }


def test_caller_format_maps_output_format_and_sample_rate(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    """Without an explicit output format the caller format should be mapped."""

    transport = RecordingTransport(MockResponse(content=b"a"), MockResponse(content=b"b"))
    monkeypatch.setattr("elevenlabs_tts.api.client.requests.post", transport)
    provider, _ = _provider(default_voice_id="v")

    opus = provider.synthesize("Hi", TTSOptions(format="opus"))
    mp3 = provider.synthesize("Hi", TTSOptions(format="mp3", sample_rate=48000))

    assert transport.calls[0][1]["params"]["output_format"] == "ulaw_8000"
    assert opus.format == "opus"
    assert opus.sample_rate == 8000
    assert transport.calls[1][1]["params"]["output_format"] == "mp3_44100_128"
    assert mp3.sample_rate == 48000


def test_config_output_format_applies_before_format_mapping(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    """A configured output format should be used when the call sets none."""

    transport = RecordingTransport(MockResponse(content=b"a"))
    monkeypatch.setattr("elevenlabs_tts.api.client.requests.post", transport)
    provider, _ = _provider(default_voice_id="v", output_format="pcm_22050")

    result = provider.synthesize("Hi", TTSOptions(format="mp3"))

    assert transport.calls[0][1]["params"]["output_format"] == "pcm_22050"
    assert result.sample_rate == 22050


def test_malformed_directive_is_sent_as_text(monkeypatch: pytest.MonkeyPatch) -> None:
    """Broken directives should never abort synthesis; the text is sent unchanged."""

    transport = RecordingTransport(MockResponse(content=b"a"))
    monkeypatch.setattr("elevenlabs_tts.api.client.requests.post", transport)
    provider, _ = _provider(default_voice_id="v")

    provider.synthesize('{"speed": fast}\nHello')

    assert transport.calls[0][1]["json"]["text"] == '{"speed": fast}\nHello'


def test_unknown_directive_keys_are_logged(monkeypatch: pytest.MonkeyPatch) -> None:
    """Unknown keys should produce a warning but not affect the request."""

    transport = RecordingTransport(MockResponse(content=b"a"))
    monkeypatch.setattr("elevenlabs_tts.api.client.requests.post", transport)
    provider, buffer = _provider(default_voice_id="v")

    provider.synthesize('{"emotion":"happy","voice":"v2"}\nHello there')

    log_text = buffer.getvalue()
    assert "event=unknown_keys keys=emotion" in log_text
    assert "stage=synthesize event=complete" in log_text
    assert "Hello there" not in log_text
    assert "sk_integrationkey123" not in log_text


def test_missing_voice_fails_before_any_request(monkeypatch: pytest.MonkeyPatch) -> None:
    """Without any voice source the call should fail without network traffic."""

    transport = RecordingTransport()
    monkeypatch.setattr("elevenlabs_tts.api.client.requests.post", transport)
    provider, buffer = _provider()

    with pytest.raises(VoiceRequiredError):
        provider.synthesize("Hello")

    assert transport.calls == []
    assert "error_type=VoiceRequiredError" in buffer.getvalue()


def test_remote_failure_propagates_with_kind(monkeypatch: pytest.MonkeyPatch) -> None:
    """Remote failures should reach the caller unchanged and be logged by kind."""

    monkeypatch.setattr(
        "elevenlabs_tts.api.client.requests.post",
        RecordingTransport(
            json_response(
                {"detail": {"status": "voice_not_found", "message": "voice missing"}},
                404,
                "Not Found",
            )
        ),
    )
    provider, buffer = _provider(default_voice_id="gone")

    with pytest.raises(ElevenLabsProviderError) as exc_info:
        provider.synthesize("Hello")

    assert exc_info.value.failure_kind == "voice_not_found"
    assert "error_type=voice_not_found" in buffer.getvalue()


def test_streaming_defaults_latency_tier_and_yields_raw_chunks(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    """Streaming should target `/stream`, default latency to 0, and pass chunks through."""

    transport = RecordingTransport(MockResponse(chunks=[b"one", b"two", b"three"]))
    monkeypatch.setattr("elevenlabs_tts.api.client.requests.post", transport)
    provider, buffer = _provider(default_voice_id="v")

    chunks = provider.stream_synthesize("Stream me")
    assert transport.calls == []
    received = list(chunks)

    url, kwargs = transport.calls[0]
    assert received == [b"one", b"two", b"three"]
    assert url == f"{_BASE_URL}/text-to-speech/v/stream"
    assert kwargs["params"] == {"output_format": "pcm_44100", "optimize_streaming_latency": "0"}
    assert "stage=stream event=complete bytes=11 chunks=3" in buffer.getvalue()


def test_streaming_respects_explicit_latency_tier(monkeypatch: pytest.MonkeyPatch) -> None:
    """An explicit latency tier should replace the streaming default."""

    transport = RecordingTransport(MockResponse(chunks=[b"x"]))
    monkeypatch.setattr("elevenlabs_tts.api.client.requests.post", transport)
    provider, _ = _provider(default_voice_id="v")

    list(provider.stream_synthesize('{"latency_tier": 2}\nHi'))

    assert transport.calls[0][1]["params"]["optimize_streaming_latency"] == "2"


def test_abandoned_stream_closes_response(monkeypatch: pytest.MonkeyPatch) -> None:
    """Closing the stream after one chunk should release the response without error."""

    response = MockResponse(chunks=[b"one", b"two", b"three"])
    monkeypatch.setattr(
        "elevenlabs_tts.api.client.requests.post", RecordingTransport(response)
    )
    provider, buffer = _provider(default_voice_id="v")

    chunks = provider.stream_synthesize("Stop early")
    assert next(chunks) == b"one"
    chunks.close()

    assert response.closed is True
    assert "event=failure" not in buffer.getvalue()


def test_empty_stream_raises_empty_response(monkeypatch: pytest.MonkeyPatch) -> None:
    """A stream that produces no audio should fail instead of ending silently."""

    monkeypatch.setattr(
        "elevenlabs_tts.api.client.requests.post",
        RecordingTransport(MockResponse(chunks=[])),
    )
    provider, _ = _provider(default_voice_id="v")

    with pytest.raises(ElevenLabsProviderError) as exc_info:
        list(provider.stream_synthesize("Nothing"))

    assert exc_info.value.failure_kind == "empty_response"


def test_reference_audio_is_cloned_once_and_used_as_voice(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    """Repeated calls with the same sample should clone once and reuse the voice."""

    def _route(url: str, kwargs: dict[str, Any]) -> MockResponse:
        if url.endswith("/voices/add"):
            return json_response({"voice_id": "cloned-voice"})
        return MockResponse(content=b"audio")

    transport = RecordingTransport(router=_route)
    monkeypatch.setattr("elevenlabs_tts.api.client.requests.post", transport)
    provider, _ = _provider(default_voice_id="config-voice")
    options = TTSOptions(reference_audio=b"RIFF-sample")

    provider.synthesize("First", options)
    provider.synthesize("Second", options)

    urls = transport.urls()
    assert urls.count(f"{_BASE_URL}/voices/add") == 1
    assert urls.count(f"{_BASE_URL}/text-to-speech/cloned-voice") == 2


def test_directive_voice_wins_over_reference_audio(monkeypatch: pytest.MonkeyPatch) -> None:
    """A directive voice should skip cloning entirely."""

    transport = RecordingTransport(MockResponse(content=b"audio"))
    monkeypatch.setattr("elevenlabs_tts.api.client.requests.post", transport)
    provider, _ = _provider()

    provider.synthesize('{"voice":"dv"}\nHi', TTSOptions(reference_audio=b"RIFF"))

    assert transport.urls() == [f"{_BASE_URL}/text-to-speech/dv"]


def test_provider_requires_api_key() -> None:
    """Construction without a key should fail with a configuration error."""

    with pytest.raises(ConfigurationError, match="ELEVENLABS_API_KEY is required"):
        ElevenLabsTTSProvider(env={})


def test_provider_reads_environment_at_construction() -> None:
    """Environment values should be picked up once when the provider is built."""

    provider = ElevenLabsTTSProvider(
        env={"ELEVENLABS_API_KEY": "env-key", "ELEVENLABS_MODEL_ID": "eleven_multilingual_v2"}
    )

    assert provider.current_model_id == "eleven_multilingual_v2"
    assert "env-key" not in repr(provider)
    provider.validate_config()
    provider.shutdown()
    provider.shutdown()
