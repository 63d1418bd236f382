"""Per-field option resolution across directive, call options, and provider config.

Responsibilities:
- Coalesce every parameter independently over ordered partial sources.
- Apply scalar validators to the coalesced values.
- Fail only when no voice id can be resolved.

Each source is reduced to a flat partial mapping and each field takes the first
value that is not `None`. Sources are never merged wholesale, so an unset field
in a higher-precedence source can not mask a real value further down.
"""

from __future__ import annotations

from typing import Any, Mapping, Sequence

from ..config import DEFAULT_MODEL_ID, ProviderConfig
from ..errors import VoiceRequiredError
from ..models.datatypes import ResolvedOptions, TTSOptions, VoiceDirective
from ..parsing import optional_flag, optional_number, optional_text
from .validators import (
    resolve_speed,
    validate_latency_tier,
    validate_seed,
    validate_stability,
    validate_unit,
)

PartialSource = Mapping[str, Any]


def directive_source(directive: VoiceDirective | None) -> PartialSource:
    """Flatten a directive into canonical parameter names."""

    if directive is None:
        return {}
    return {
        "voice_id": directive.voice,
        "model_id": directive.model,
        "speed": directive.speed,
        "rate": directive.rate,
        "stability": directive.stability,
        "similarity_boost": directive.similarity,
        "style": directive.style,
        "speaker_boost": directive.speaker_boost,
        "seed": directive.seed,
        "language": directive.language,
        "output_format": directive.output_format,
        "latency_tier": directive.latency_tier,
        "once": directive.once,
        "normalize": directive.normalize,
    }


def options_source(options: TTSOptions | None) -> PartialSource:
    """Flatten call options into canonical parameter names.

    Options may be built directly by a host without type checks, so every
    value is projected again; a malformed value becomes `None` and can not
    mask a config default.
    """

    if options is None:
        return {}
    similarity = optional_number(options.similarity)
    if similarity is None:
        similarity = optional_number(options.similarity_boost)
    return {
        "voice_id": optional_text(options.voice),
        "model_id": optional_text(options.model_id),
        "speed": optional_number(options.speed),
        "rate": optional_number(options.rate),
        "stability": optional_number(options.stability),
        "similarity_boost": similarity,
        "style": optional_number(options.style),
        "speaker_boost": optional_flag(options.speaker_boost),
        "seed": optional_number(options.seed),
        "language": optional_text(options.language),
        "output_format": optional_text(options.output_format),
        "latency_tier": optional_number(options.latency_tier),
    }


def config_source(config: ProviderConfig) -> PartialSource:
    """Flatten provider defaults into canonical parameter names."""

    return {
        "voice_id": config.default_voice_id or None,
        "model_id": config.default_model_id or None,
        "stability": config.stability,
        "similarity_boost": config.similarity_boost,
        "style": config.style,
        "speaker_boost": config.speaker_boost,
        "output_format": config.output_format or None,
    }


def coalesce(sources: Sequence[PartialSource], name: str) -> Any:
    """Return the first non-`None` value of `name` across `sources`."""

    for source in sources:
        value = source.get(name)
        if value is not None:
            return value
    return None


def resolve_options(
    directive: VoiceDirective | None,
    options: TTSOptions | None,
    config: ProviderConfig,
) -> ResolvedOptions:
    """Resolve one synthesis call's parameters.

    Precedence per field: directive > call options > provider config.

    Raises:
        VoiceRequiredError: If no source provides a voice id.
    """

    sources = (directive_source(directive), options_source(options), config_source(config))

    voice_id = coalesce(sources, "voice_id")
    if not voice_id:
        raise VoiceRequiredError()
    model_id = coalesce(sources, "model_id") or DEFAULT_MODEL_ID

    return ResolvedOptions(
        voice_id=voice_id,
        model_id=model_id,
        speed=resolve_speed(coalesce(sources, "speed"), coalesce(sources, "rate")),
        stability=validate_stability(coalesce(sources, "stability"), model_id),
        similarity_boost=validate_unit(coalesce(sources, "similarity_boost")),
        style=validate_unit(coalesce(sources, "style")),
        speaker_boost=coalesce(sources, "speaker_boost"),
        seed=validate_seed(coalesce(sources, "seed")),
        language=coalesce(sources, "language"),
        output_format=coalesce(sources, "output_format"),
        latency_tier=validate_latency_tier(coalesce(sources, "latency_tier")),
        once=coalesce(sources, "once"),
        normalize=coalesce(sources, "normalize"),
    )
