"""Structured call logging utilities.

Responsibilities:
- Emit concise, deterministic per-call synthesis logs through `loguru`.
- Warn about unrecognized directive keys out-of-band.
- Never log API keys or synthesized text.
"""

from __future__ import annotations

from typing import Iterable, TextIO

from loguru import logger as _loguru_logger


def _sanitize_context_value(value: object) -> str:
    """Convert context values into stable, shell-safe tokens."""

    raw = str(value).strip()
    if not raw:
        return "none"
    return "".join(
        character if character.isalnum() or character in {"-", "_", ".", ":", "/", ","} else "_"
        for character in raw
    )


def _format_context(context: dict[str, object]) -> str:
    """Serialize context key/value pairs in deterministic key order."""

    if not context:
        return ""
    tokens = [
        f"{key}={_sanitize_context_value(context[key])}"
        for key in sorted(context.keys())
        if context[key] is not None
    ]
    if not tokens:
        return ""
    return " " + " ".join(tokens)


class RunLogger:
    """Emit deterministic call logs for provider activity.

    Without a sink the host's existing loguru configuration is used as-is.
    With a sink, loguru is reconfigured to write bare messages to it.
    """

    def __init__(self, sink: TextIO | None = None, level: str = "INFO") -> None:
        """Initialize logger sink and configure deterministic formatting."""

        self._sink = sink
        if sink is not None:
            _loguru_logger.remove()
            _loguru_logger.add(sink, format="{message}", level=level, colorize=False)

    def _emit(self, level: str, event: str, stage: str, **context: object) -> None:
        """Emit one structured log line."""

        line = f"[tts] level={level} stage={stage} event={event}{_format_context(context)}"
        _loguru_logger.log(level, line)

    def log_call_start(self, stage: str, **context: object) -> None:
        """Emit a call-start event, e.g. with voice/model/format context."""

        self._emit("INFO", "start", stage, **context)

    def log_call_complete(self, stage: str, **context: object) -> None:
        """Emit a call-complete event."""

        self._emit("INFO", "complete", stage, **context)

    def log_call_failure(self, stage: str, error_type: str) -> None:
        """Emit a call-failure event without sensitive payload details."""

        self._emit("ERROR", "failure", stage, error_type=error_type)

    def log_unknown_directive_keys(self, keys: Iterable[str]) -> None:
        """Warn that a directive carried keys outside the recognized set."""

        self._emit("WARNING", "unknown_keys", "directive", keys=",".join(keys))

    def log_voices_refreshed(self, count: int) -> None:
        """Emit a voice cache refresh event."""

        self._emit("INFO", "refresh", "voices", count=count)

    def log_warning(self, stage: str, event: str, **context: object) -> None:
        """Emit a non-fatal warning event."""

        self._emit("WARNING", event, stage, **context)
