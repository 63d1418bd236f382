"""TTS provider interface and ElevenLabs-backed implementation.

Responsibilities:
- Define the host-facing provider protocol.
- Drive one batch or streaming synthesis call: directive parsing, option
  resolution, format mapping, request building, and result normalization.
- Expose voice listing, health probing, and config validation.
"""

from __future__ import annotations

from contextlib import closing
from dataclasses import dataclass, replace
from time import monotonic
from typing import Any, Callable, Iterator, Mapping, Protocol

from ..api.client import ElevenLabsClient, ElevenLabsProviderError
from ..config import API_KEY_ENV, DEFAULT_MODEL_ID, ConfigLoader, ProviderConfig
from ..errors import ConfigurationError, ProviderStageError
from ..models.datatypes import (
    InstallStep,
    ResolvedOptions,
    SpeechRequest,
    SynthesisResult,
    TTSOptions,
    Voice,
    VoicePluginMetadata,
)
from ..params.directive import parse_voice_directive
from ..params.formats import DEFAULT_AUDIO_FORMAT, map_audio_format, parse_sample_rate
from ..params.resolver import resolve_options
from ..telemetry.logger import RunLogger
from .cloning import VoiceCloner
from .voices import VoiceDirectory

WORDS_PER_SECOND = 2.5
STREAMING_DEFAULT_LATENCY_TIER = 0

PROVIDER_METADATA = VoicePluginMetadata(
    name="elevenlabs",
    version="1.0.0",
    type="tts",
    description="ElevenLabs high-quality text-to-speech with streaming support",
    capabilities=("streaming", "voice-selection", "voice-parameters", "voice-cloning"),
    local=False,
    requires_env=(API_KEY_ENV,),
    install=(
        InstallStep(
            kind="manual",
            label="Get ElevenLabs API key",
            instructions="Sign up at https://elevenlabs.io and get your API key",
        ),
    ),
    primary_env=API_KEY_ENV,
    emoji="🔊",
    homepage="https://elevenlabs.io",
)


class TTSProvider(Protocol):
    """Protocol for host-registered text-to-speech providers."""

    metadata: VoicePluginMetadata

    @property
    def voices(self) -> list[Voice]:
        """Return currently known voices without network access."""

    def validate_config(self) -> None:
        """Raise when the provider is not usable."""

    def synthesize(self, text: str, options: Any = None) -> SynthesisResult:
        """Synthesize `text` into one audio payload."""

    def stream_synthesize(self, text: str, options: Any = None) -> Iterator[bytes]:
        """Yield audio chunks for `text` as they arrive."""

    def fetch_voices(self) -> list[Voice]:
        """Return voices, refreshing stale caches."""

    def health_check(self) -> bool:
        """Return remote liveness."""

    def shutdown(self) -> None:
        """Release provider resources; idempotent."""


@dataclass(frozen=True, slots=True)
class PreparedCall:
    """Everything derived from one call's input before the remote request."""

    request: SpeechRequest
    resolved: ResolvedOptions
    options: TTSOptions
    text: str
    output_format: str


def coerce_options(options: TTSOptions | Mapping[str, Any] | None) -> TTSOptions:
    """Accept typed options, a host mapping, or nothing."""

    if options is None:
        return TTSOptions()
    if isinstance(options, TTSOptions):
        return options
    return TTSOptions.from_mapping(options)


def _without_none(payload: Mapping[str, Any]) -> dict[str, Any]:
    return {key: value for key, value in payload.items() if value is not None}


def build_speech_request(
    resolved: ResolvedOptions,
    text: str,
    output_format: str,
    *,
    streaming: bool = False,
) -> SpeechRequest:
    """Build the wire request for one synthesis call.

    Unset body members are omitted. Streaming calls default the latency tier
    to the lowest-latency value; batch calls only send it when resolved.
    """

    voice_settings = _without_none(
        {
            "stability": resolved.stability,
            "similarity_boost": resolved.similarity_boost,
            "style": resolved.style,
            "use_speaker_boost": resolved.speaker_boost,
        }
    )
    body = _without_none(
        {
            "text": text,
            "model_id": resolved.model_id,
            "voice_settings": voice_settings,
            "seed": resolved.seed,
            "language_code": resolved.language,
        }
    )

    query = {"output_format": output_format}
    latency_tier = resolved.latency_tier
    if latency_tier is None and streaming:
        latency_tier = STREAMING_DEFAULT_LATENCY_TIER
    if latency_tier is not None:
        query["optimize_streaming_latency"] = str(latency_tier)

    return SpeechRequest(
        voice_id=resolved.voice_id,
        body=body,
        query=query,
        streaming=streaming,
    )


def estimate_duration_ms(text: str, speed: float | None) -> float:
    """Approximate playback duration from word count.

    Assumes 2.5 words per second at speed 1.0. This is a heuristic, not a
    measurement of the returned audio.
    """

    words = len(text.split())
    multiplier = speed or 1.0
    return (words / WORDS_PER_SECOND) * 1000.0 / multiplier


class ElevenLabsTTSProvider:
    """ElevenLabs-backed provider implementing `TTSProvider`."""

    metadata = PROVIDER_METADATA

    def __init__(
        self,
        config: ProviderConfig | Mapping[str, Any] | None = None,
        *,
        env: Mapping[str, str] | None = None,
        client: ElevenLabsClient | None = None,
        run_logger: RunLogger | None = None,
        clock: Callable[[], float] = monotonic,
    ) -> None:
        """Create a provider, reading the environment once.

        Raises:
            ConfigurationError: If no API key is available.
        """

        if isinstance(config, ProviderConfig):
            self.config = config
        else:
            self.config = ConfigLoader.from_env(env=env, explicit=config or {})
        self.client = client or ElevenLabsClient(
            api_key=self.config.api_key,
            base_url=self.config.base_url,
            timeout_seconds=self.config.timeout_seconds,
        )
        self.run_logger = run_logger or RunLogger()
        self.directory = VoiceDirectory(
            source=self.client,
            clock=clock,
            run_logger=self.run_logger,
        )
        self.cloner = VoiceCloner(target=self.client)

    def __repr__(self) -> str:
        return f"ElevenLabsTTSProvider(config={self.config!r})"

    @property
    def voices(self) -> list[Voice]:
        return self.directory.voices

    @property
    def current_model_id(self) -> str:
        return self.config.default_model_id or DEFAULT_MODEL_ID

    def validate_config(self) -> None:
        """Raise `ConfigurationError` when the API key is missing."""

        if not self.config.api_key:
            raise ConfigurationError(f"{API_KEY_ENV} is required")

    def fetch_voices(self) -> list[Voice]:
        """Return cached voices, fetching when the cache is empty or older than the TTL."""

        return self.directory.list_voices()

    def health_check(self) -> bool:
        return self.client.probe()

    def shutdown(self) -> None:
        """No persistent connections are held, so there is nothing to release."""

    def prepare(
        self,
        text: str,
        options: TTSOptions | Mapping[str, Any] | None = None,
        *,
        streaming: bool = False,
    ) -> PreparedCall:
        """Parse, resolve, and build the request for one call without sending it.

        Raises:
            VoiceRequiredError: If no voice id can be resolved.
        """

        call_options = coerce_options(options)
        parsed = parse_voice_directive(text)
        if parsed.unknown_keys:
            self.run_logger.log_unknown_directive_keys(parsed.unknown_keys)
        clean_text = parsed.stripped if parsed.directive is not None else text

        directive_voice = parsed.directive.voice if parsed.directive is not None else None
        if call_options.reference_audio and directive_voice is None:
            cloned_voice_id = self.cloner.resolve(call_options.reference_audio)
            call_options = replace(call_options, voice=cloned_voice_id)

        resolved = resolve_options(parsed.directive, call_options, self.config)
        output_format = resolved.output_format or map_audio_format(call_options.format)
        request = build_speech_request(
            resolved,
            clean_text,
            output_format,
            streaming=streaming,
        )
        return PreparedCall(
            request=request,
            resolved=resolved,
            options=call_options,
            text=clean_text,
            output_format=output_format,
        )

    def synthesize(
        self,
        text: str,
        options: TTSOptions | Mapping[str, Any] | None = None,
    ) -> SynthesisResult:
        """Synthesize `text` in one request and return audio with metadata."""

        prepared = self._prepare_logged("synthesize", text, options, streaming=False)
        try:
            audio = self.client.synthesize(prepared.request)
        except ElevenLabsProviderError as exc:
            self.run_logger.log_call_failure("synthesize", exc.failure_kind)
            raise

        sample_rate = prepared.options.sample_rate or parse_sample_rate(prepared.output_format)
        result = SynthesisResult(
            audio=audio,
            format=prepared.options.format or DEFAULT_AUDIO_FORMAT,
            sample_rate=sample_rate,
            duration_ms=estimate_duration_ms(prepared.text, prepared.resolved.speed),
        )
        self.run_logger.log_call_complete("synthesize", bytes=len(audio))
        return result

    def stream_synthesize(
        self,
        text: str,
        options: TTSOptions | Mapping[str, Any] | None = None,
    ) -> Iterator[bytes]:
        """Yield audio chunks in network order without re-buffering.

        Work starts on first iteration. Closing the iterator early is a valid
        way to cancel and releases the HTTP response.
        """

        prepared = self._prepare_logged("stream", text, options, streaming=True)
        chunk_count = 0
        byte_count = 0
        try:
            with closing(self.client.stream(prepared.request)) as chunks:
                for chunk in chunks:
                    chunk_count += 1
                    byte_count += len(chunk)
                    yield chunk
        except ElevenLabsProviderError as exc:
            self.run_logger.log_call_failure("stream", exc.failure_kind)
            raise
        self.run_logger.log_call_complete("stream", chunks=chunk_count, bytes=byte_count)

    def _prepare_logged(
        self,
        stage: str,
        text: str,
        options: TTSOptions | Mapping[str, Any] | None,
        *,
        streaming: bool,
    ) -> PreparedCall:
        try:
            prepared = self.prepare(text, options, streaming=streaming)
        except (ProviderStageError, ElevenLabsProviderError) as exc:
            error_type = getattr(exc, "failure_kind", None) or type(exc).__name__
            self.run_logger.log_call_failure(stage, error_type)
            raise
        self.run_logger.log_call_start(
            stage,
            voice=prepared.resolved.voice_id,
            model=prepared.resolved.model_id,
            output_format=prepared.output_format,
        )
        return prepared
