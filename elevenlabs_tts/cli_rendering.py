"""CLI output and error rendering helpers.

This module centralizes user-facing CLI presentation for command diagnostics,
synthesis summaries, voice rows, model rows, and provider status.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Mapping, NoReturn

import typer

from .api.client import ElevenLabsProviderError
from .errors import ProviderStageError
from .models.datatypes import SynthesisResult

_FAILURE_HINTS = {
    "invalid_api_key": "Check the key with `elevenlabs-tts credentials` or `ELEVENLABS_API_KEY`.",
    "quota_exceeded": "Check the remaining character quota of the ElevenLabs account.",
    "voice_not_found": "List available voices with `elevenlabs-tts voices`.",
    "rate_limited": "Wait a moment and retry.",
    "timeout": "Retry, or check network connectivity to the ElevenLabs API.",
    "transport": "Check network connectivity and `ELEVENLABS_BASE_URL`.",
}


def exit_with_command_error(command_name: str, exc: Exception) -> NoReturn:
    """Print concise diagnostics for command failures and exit with code 1."""

    if isinstance(exc, ProviderStageError):
        typer.secho(
            f"{command_name} failed at stage `{exc.stage}`: {exc.detail}",
            fg=typer.colors.RED,
            err=True,
        )
        if exc.hint:
            typer.secho(f"Hint: {exc.hint}", fg=typer.colors.YELLOW, err=True)
    elif isinstance(exc, ElevenLabsProviderError):
        typer.secho(
            f"{command_name} failed at stage `remote` ({exc.failure_kind}): {exc}",
            fg=typer.colors.RED,
            err=True,
        )
        hint = _FAILURE_HINTS.get(exc.failure_kind)
        if hint:
            typer.secho(f"Hint: {hint}", fg=typer.colors.YELLOW, err=True)
    else:
        typer.secho(f"{command_name} failed: {exc}", fg=typer.colors.RED, err=True)
    raise typer.Exit(code=1) from exc


def echo_synthesis_summary(result: SynthesisResult, out: Path) -> None:
    """Print where audio was written and its normalized metadata."""

    typer.echo(f"Audio: {out}")
    typer.echo(f"Bytes: {len(result.audio)}")
    typer.echo(f"Format: {result.format}")
    typer.echo(f"Sample rate: {result.sample_rate}")
    typer.echo(f"Estimated duration (ms): {result.duration_ms:.0f}")


def echo_voice_rows(payload: Mapping[str, Any]) -> None:
    """Print one tab-separated row per voice, sorted by name."""

    voices = sorted(payload["voices"], key=lambda voice: (voice["name"], voice["id"]))
    for voice in voices:
        typer.echo(
            "\t".join(
                [
                    voice["id"],
                    voice["name"],
                    voice["language"] or "-",
                    voice["gender"] or "-",
                ]
            )
        )
    typer.echo(f"Voices: {payload['count']}")


def echo_model_rows(payload: Mapping[str, Any]) -> None:
    """Print the model catalog, marking the current default with `*`."""

    current = payload["current_model"]
    for model in payload["models"]:
        marker = "*" if model["id"] == current else " "
        typer.echo(f"{marker} {model['id']}\t{model['description']}")


def echo_status(payload: Mapping[str, Any]) -> None:
    """Print provider status fields as `key: value` lines."""

    typer.echo(f"Provider: {payload['provider']} {payload['version']}")
    typer.echo(f"Description: {payload['description']}")
    typer.echo(f"Capabilities: {', '.join(payload['capabilities'])}")
    typer.echo(f"Healthy: {'yes' if payload['healthy'] else 'no'}")
    typer.echo(f"Cached voices: {payload['voice_count']}")
