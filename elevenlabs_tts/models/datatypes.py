"""Core datatypes shared across provider modules.

Responsibilities:
- Represent immutable records exchanged between parsing, resolution, and synthesis.
- Keep the host-facing contract explicit and typed.

Key types:
- `TTSOptions`, `VoiceDirective`, `ResolvedOptions`, `SpeechRequest`,
  `SynthesisResult`, `Voice`, `ModelInfo`, `InstallStep`, and `VoicePluginMetadata`.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Mapping

from ..parsing import optional_flag, optional_number, optional_text, parse_permissive_boolean


def _optional_integer(value: object) -> int | None:
    number = optional_number(value)
    return number if isinstance(number, int) else None


def _optional_audio(value: object) -> bytes | None:
    if isinstance(value, (bytes, bytearray)) and value:
        return bytes(value)
    return None


_OPTION_PROJECTIONS: dict[str, Callable[[object], Any]] = {
    "voice": optional_text,
    "speed": optional_number,
    "rate": optional_number,
    "stability": optional_number,
    "similarity": optional_number,
    "similarity_boost": optional_number,
    "style": optional_number,
    "speaker_boost": parse_permissive_boolean,
    "seed": optional_number,
    "model_id": optional_text,
    "output_format": optional_text,
    "language": optional_text,
    "latency_tier": optional_number,
    "format": optional_text,
    "sample_rate": _optional_integer,
    "reference_audio": _optional_audio,
}


@dataclass(frozen=True, slots=True)
class TTSOptions:
    """Call-scoped synthesis options supplied by the host.

    Attributes:
        voice: Provider voice id.
        speed: Speed multiplier; wins over `rate` when both are set.
        rate: Speaking rate in words per minute.
        stability: Voice stability in [0, 1].
        similarity: Similarity boost in [0, 1].
        similarity_boost: Alias of `similarity`; used only when `similarity` is unset.
        style: Style exaggeration in [0, 1].
        speaker_boost: Whether to request speaker boost.
        seed: Deterministic sampling seed.
        model_id: Provider model id.
        output_format: Provider output format string, e.g. `mp3_44100_128`.
        language: Language code sent as `language_code`.
        latency_tier: Streaming latency optimization tier (0-4).
        format: Caller-facing audio format tag, e.g. `pcm_s16le` or `mp3`.
        sample_rate: Caller override for the reported sample rate.
        reference_audio: Audio sample used to clone a voice for this call.
    """

    voice: str | None = None
    speed: float | None = None
    rate: float | None = None
    stability: float | None = None
    similarity: float | None = None
    similarity_boost: float | None = None
    style: float | None = None
    speaker_boost: bool | None = None
    seed: int | None = None
    model_id: str | None = None
    output_format: str | None = None
    language: str | None = None
    latency_tier: int | None = None
    format: str | None = None
    sample_rate: int | None = None
    reference_audio: bytes | None = field(default=None, repr=False)

    _CAMEL_ALIASES = {
        "speakerBoost": "speaker_boost",
        "similarityBoost": "similarity_boost",
        "modelId": "model_id",
        "outputFormat": "output_format",
        "latencyTier": "latency_tier",
        "sampleRate": "sample_rate",
        "referenceAudio": "reference_audio",
    }

    @classmethod
    def from_mapping(cls, payload: Mapping[str, Any]) -> "TTSOptions":
        """Build options from a host mapping with snake_case or camelCase keys.

        Unknown keys are ignored. Each value is projected by its field type
        (flags accept tokens like `"false"`); a malformed value counts as unset.
        """

        values: dict[str, Any] = {}
        for raw_key, value in payload.items():
            key = cls._CAMEL_ALIASES.get(raw_key, raw_key)
            project = _OPTION_PROJECTIONS.get(key)
            if project is None:
                continue
            projected = project(value)
            if projected is not None:
                values[key] = projected
        return cls(**values)


@dataclass(frozen=True, slots=True)
class VoiceDirective:
    """Typed projection of an inline JSON voice directive.

    Only recognized keys of the expected JSON type survive the projection;
    alternative spellings are collapsed into one canonical field.
    """

    voice: str | None = None
    model: str | None = None
    speed: float | None = None
    rate: float | None = None
    stability: float | None = None
    similarity: float | None = None
    style: float | None = None
    speaker_boost: bool | None = None
    seed: float | None = None
    normalize: bool | None = None
    language: str | None = None
    output_format: str | None = None
    latency_tier: float | None = None
    once: bool | None = None

    @classmethod
    def from_mapping(cls, payload: Mapping[str, Any]) -> "VoiceDirective":
        """Project an untrusted parsed JSON object into a directive."""

        def first_text(*keys: str) -> str | None:
            for key in keys:
                value = optional_text(payload.get(key))
                if value is not None:
                    return value
            return None

        return cls(
            voice=first_text("voiceId", "voice_id", "voice"),
            model=first_text("modelId", "model_id", "model"),
            speed=optional_number(payload.get("speed")),
            rate=optional_number(payload.get("rate")),
            stability=optional_number(payload.get("stability")),
            similarity=optional_number(payload.get("similarity")),
            style=optional_number(payload.get("style")),
            speaker_boost=optional_flag(payload.get("speakerBoost")),
            seed=optional_number(payload.get("seed")),
            normalize=optional_flag(payload.get("normalize")),
            language=first_text("lang", "language"),
            output_format=first_text("outputFormat", "output_format"),
            latency_tier=optional_number(payload.get("latency_tier")),
            once=optional_flag(payload.get("once")),
        )


@dataclass(frozen=True, slots=True)
class ResolvedOptions:
    """Fully merged and validated parameters for one synthesis request."""

    voice_id: str
    model_id: str
    speed: float | None = None
    stability: float | None = None
    similarity_boost: float | None = None
    style: float | None = None
    speaker_boost: bool | None = None
    seed: int | None = None
    language: str | None = None
    output_format: str | None = None
    latency_tier: int | None = None
    once: bool | None = None
    normalize: bool | None = None


@dataclass(frozen=True, slots=True)
class SpeechRequest:
    """Wire-level speech request ready for the remote API client.

    Attributes:
        voice_id: Voice id used as the URL path parameter.
        body: JSON request body with `None` members already omitted.
        query: URL query parameters.
        streaming: Whether the `/stream` endpoint variant is targeted.
    """

    voice_id: str
    body: dict[str, Any]
    query: dict[str, str]
    streaming: bool = False


@dataclass(frozen=True, slots=True)
class SynthesisResult:
    """Normalized batch synthesis output.

    Attributes:
        audio: Raw audio payload bytes.
        format: Caller-facing audio format tag.
        sample_rate: Sample rate in Hz.
        duration_ms: Approximate duration estimated from word count, not measured audio.
    """

    audio: bytes = field(repr=False)
    format: str
    sample_rate: int
    duration_ms: float


@dataclass(frozen=True, slots=True)
class Voice:
    """A voice available on the remote account."""

    id: str
    name: str
    language: str | None = None
    gender: str | None = None
    description: str | None = None

    def as_dict(self) -> dict[str, str | None]:
        """Return a JSON-friendly projection with explicit `None` placeholders."""

        return {
            "id": self.id,
            "name": self.name,
            "language": self.language,
            "gender": self.gender,
            "description": self.description,
        }


@dataclass(frozen=True, slots=True)
class ModelInfo:
    """Static catalog entry for a synthesis model."""

    id: str
    name: str
    description: str


@dataclass(frozen=True, slots=True)
class InstallStep:
    """One host-rendered installation step for the plugin."""

    kind: str
    label: str
    instructions: str


@dataclass(frozen=True, slots=True)
class VoicePluginMetadata:
    """Descriptive metadata exposed to the host voice-plugin registry."""

    name: str
    version: str
    type: str
    description: str
    capabilities: tuple[str, ...]
    local: bool
    requires_env: tuple[str, ...]
    install: tuple[InstallStep, ...] = ()
    primary_env: str | None = None
    emoji: str | None = None
    homepage: str | None = None
