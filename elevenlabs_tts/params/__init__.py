"""Parameter handling: directive parsing, validation, resolution, and format mapping."""

from .directive import KNOWN_DIRECTIVE_KEYS, DirectiveParseResult, parse_voice_directive
from .formats import AUDIO_FORMATS, OUTPUT_FORMATS, map_audio_format, parse_sample_rate
from .resolver import resolve_options
from .validators import (
    resolve_speed,
    validate_latency_tier,
    validate_seed,
    validate_stability,
    validate_unit,
)

__all__ = [
    "AUDIO_FORMATS",
    "KNOWN_DIRECTIVE_KEYS",
    "OUTPUT_FORMATS",
    "DirectiveParseResult",
    "map_audio_format",
    "parse_sample_rate",
    "parse_voice_directive",
    "resolve_options",
    "resolve_speed",
    "validate_latency_tier",
    "validate_seed",
    "validate_stability",
    "validate_unit",
]
