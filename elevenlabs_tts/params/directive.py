"""Inline voice directive parsing.

Responsibilities:
- Detect a single JSON object on the first line of input text.
- Project the untrusted mapping into a typed `VoiceDirective`.
- Report unrecognized keys without rejecting the directive.

A directive is a best-effort convenience: anything that does not look like a
well-formed JSON object on the first line degrades to "no directive" and the
input text is returned unchanged.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field

from ..models.datatypes import VoiceDirective

KNOWN_DIRECTIVE_KEYS = frozenset(
    {
        "voice",
        "voice_id",
        "voiceId",
        "model",
        "model_id",
        "modelId",
        "speed",
        "rate",
        "stability",
        "similarity",
        "style",
        "speakerBoost",
        "seed",
        "normalize",
        "lang",
        "language",
        "output_format",
        "outputFormat",
        "latency_tier",
        "once",
    }
)


@dataclass(frozen=True, slots=True)
class DirectiveParseResult:
    """Outcome of directive extraction.

    Attributes:
        directive: Parsed directive, or `None` when the first line is not one.
        stripped: Text after the directive line, or the original text when none.
        unknown_keys: Top-level keys outside the recognized set, in input order.
    """

    directive: VoiceDirective | None
    stripped: str
    unknown_keys: list[str] = field(default_factory=list)


def parse_voice_directive(text: str) -> DirectiveParseResult:
    """Split an optional first-line JSON directive off `text`."""

    lines = text.split("\n")
    first_line = lines[0].strip() if lines else ""

    if not first_line.startswith("{") or not first_line.endswith("}"):
        return DirectiveParseResult(directive=None, stripped=text)

    try:
        parsed = json.loads(first_line)
    except (ValueError, RecursionError):
        return DirectiveParseResult(directive=None, stripped=text)
    if not isinstance(parsed, dict):
        return DirectiveParseResult(directive=None, stripped=text)

    unknown_keys = [key for key in parsed if key not in KNOWN_DIRECTIVE_KEYS]
    return DirectiveParseResult(
        directive=VoiceDirective.from_mapping(parsed),
        stripped="\n".join(lines[1:]),
        unknown_keys=unknown_keys,
    )
