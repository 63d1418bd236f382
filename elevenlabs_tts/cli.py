"""Command-line interface for the ElevenLabs TTS provider.

Responsibilities:
- Expose user-facing commands for synthesis, voice/model listing, and status.
- Convert CLI arguments into provider settings and per-call `TTSOptions`.
- Manage the securely stored API key.

Key public functions:
- `app`: Typer application instance.
- `main`: invoke the Typer application.
"""

from __future__ import annotations

from pathlib import Path
from typing import Annotated, Any, Callable

import typer

from .cli_rendering import (
    echo_model_rows,
    echo_status,
    echo_synthesis_summary,
    echo_voice_rows,
    exit_with_command_error,
)
from .config import ConfigLoader
from .credentials import CredentialStore, create_credential_store
from .errors import ProviderStageError
from .introspection import get_status, list_models, list_voices
from .models.datatypes import TTSOptions
from .params.formats import AUDIO_FORMATS, OUTPUT_FORMATS
from .parsing import normalize_optional_string
from .tts.provider import ElevenLabsTTSProvider

app = typer.Typer(
    name="elevenlabs-tts",
    no_args_is_help=True,
    help="ElevenLabs text-to-speech CLI.",
)

credential_store_factory: Callable[[], CredentialStore] = create_credential_store

ConfigOption = Annotated[
    Path | None,
    typer.Option("--config", help="YAML file with provider settings."),
]
ApiKeyOption = Annotated[
    str | None,
    typer.Option(
        "--api-key",
        help="ElevenLabs API key (overrides stored key and environment).",
    ),
]
VoiceOption = Annotated[str | None, typer.Option("--voice", help="Voice id.")]
ModelOption = Annotated[str | None, typer.Option("--model", help="Model id.")]
FormatOption = Annotated[
    str | None,
    typer.Option("--format", help=f"Caller audio format: {', '.join(AUDIO_FORMATS)}."),
]
OutputFormatOption = Annotated[
    str | None,
    typer.Option(
        "--output-format",
        help=f"Provider output format: {', '.join(OUTPUT_FORMATS)}.",
    ),
]
LanguageOption = Annotated[
    str | None, typer.Option("--language", help="Language code, e.g. `en`.")
]
SpeedOption = Annotated[
    float | None, typer.Option("--speed", help="Speech speed multiplier (0.25-4.0).")
]


def _load_yaml_config(config_path: Path | None) -> dict[str, Any]:
    """Load a YAML config file when requested and map failures to stage errors."""

    if config_path is None:
        return {}

    try:
        return ConfigLoader.from_yaml(config_path)
    except FileNotFoundError as exc:
        raise ProviderStageError(
            stage="config",
            detail=f"Config file not found: `{config_path}`.",
            hint="Provide an existing path via `--config <path.yaml>`.",
        ) from exc
    except ValueError as exc:
        raise ProviderStageError(
            stage="config",
            detail=f"Invalid config file `{config_path}`: {exc}",
            hint="Fix config keys/values and rerun.",
        ) from exc
    except Exception as exc:
        raise ProviderStageError(
            stage="config",
            detail=f"Failed to load config file `{config_path}`: {exc}",
            hint="Verify YAML syntax and file permissions.",
        ) from exc


def _build_provider(config_path: Path | None, api_key: str | None) -> ElevenLabsTTSProvider:
    """Create a provider with `--api-key` > config file > stored key > environment."""

    explicit = _load_yaml_config(config_path)
    normalized_api_key = normalize_optional_string(api_key)
    if normalized_api_key is not None:
        explicit["api_key"] = normalized_api_key

    secure: dict[str, str] = {}
    stored_api_key = credential_store_factory().get_api_key()
    if stored_api_key is not None:
        secure["api_key"] = stored_api_key

    config = ConfigLoader.from_env(explicit=explicit, secure=secure)
    return ElevenLabsTTSProvider(config)


def _call_options(
    voice: str | None,
    model: str | None,
    audio_format: str | None,
    output_format: str | None,
    language: str | None,
    speed: float | None,
) -> TTSOptions:
    return TTSOptions(
        voice=normalize_optional_string(voice),
        model_id=normalize_optional_string(model),
        format=normalize_optional_string(audio_format),
        output_format=normalize_optional_string(output_format),
        language=normalize_optional_string(language),
        speed=speed,
    )


@app.command("speak")
def speak_command(
    text: Annotated[str, typer.Argument(help="Text to speak; may start with a JSON directive line.")],
    out: Annotated[Path, typer.Option("--out", help="Path of the audio file to write.")],
    voice: VoiceOption = None,
    model: ModelOption = None,
    audio_format: FormatOption = None,
    output_format: OutputFormatOption = None,
    language: LanguageOption = None,
    speed: SpeedOption = None,
    config_file: ConfigOption = None,
    api_key: ApiKeyOption = None,
) -> None:
    """Synthesize text in one request and write the audio file."""

    try:
        provider = _build_provider(config_file, api_key)
        options = _call_options(voice, model, audio_format, output_format, language, speed)
        result = provider.synthesize(text, options)
        out.parent.mkdir(parents=True, exist_ok=True)
        out.write_bytes(result.audio)
    except Exception as exc:
        exit_with_command_error("speak", exc)

    echo_synthesis_summary(result, out)


@app.command("stream")
def stream_command(
    text: Annotated[str, typer.Argument(help="Text to speak; may start with a JSON directive line.")],
    out: Annotated[Path, typer.Option("--out", help="Path of the audio file to write.")],
    voice: VoiceOption = None,
    model: ModelOption = None,
    audio_format: FormatOption = None,
    output_format: OutputFormatOption = None,
    language: LanguageOption = None,
    speed: SpeedOption = None,
    config_file: ConfigOption = None,
    api_key: ApiKeyOption = None,
) -> None:
    """Stream synthesized audio to a file chunk by chunk."""

    chunk_count = 0
    byte_count = 0
    try:
        provider = _build_provider(config_file, api_key)
        options = _call_options(voice, model, audio_format, output_format, language, speed)
        out.parent.mkdir(parents=True, exist_ok=True)
        with out.open("wb") as audio_file:
            for chunk in provider.stream_synthesize(text, options):
                audio_file.write(chunk)
                chunk_count += 1
                byte_count += len(chunk)
    except Exception as exc:
        exit_with_command_error("stream", exc)

    typer.echo(f"Audio: {out}")
    typer.echo(f"Chunks: {chunk_count}")
    typer.echo(f"Bytes: {byte_count}")


@app.command("voices")
def voices_command(
    language: Annotated[
        str | None,
        typer.Option("--language", help="Language prefix filter, e.g. `en`."),
    ] = None,
    config_file: ConfigOption = None,
    api_key: ApiKeyOption = None,
) -> None:
    """List voices available to the account."""

    try:
        provider = _build_provider(config_file, api_key)
        payload = list_voices(provider, normalize_optional_string(language))
    except Exception as exc:
        exit_with_command_error("voices", exc)

    echo_voice_rows(payload)


@app.command("models")
def models_command(
    config_file: ConfigOption = None,
    api_key: ApiKeyOption = None,
) -> None:
    """List known models and mark the configured default."""

    try:
        provider = _build_provider(config_file, api_key)
        payload = list_models(provider)
    except Exception as exc:
        exit_with_command_error("models", exc)

    echo_model_rows(payload)


@app.command("status")
def status_command(
    config_file: ConfigOption = None,
    api_key: ApiKeyOption = None,
) -> None:
    """Probe the API and print provider status."""

    try:
        provider = _build_provider(config_file, api_key)
        payload = get_status(provider)
    except Exception as exc:
        exit_with_command_error("status", exc)

    echo_status(payload)


@app.command("credentials")
def credentials_command(
    set_api_key: Annotated[
        bool,
        typer.Option(
            "--set-api-key",
            help="Prompt for API key with hidden input and store it securely.",
        ),
    ] = False,
    clear_api_key: Annotated[
        bool,
        typer.Option(
            "--clear-api-key",
            help="Clear stored API key from secure credential storage.",
        ),
    ] = False,
) -> None:
    """Manage the securely stored ElevenLabs API key."""

    if set_api_key and clear_api_key:
        exit_with_command_error(
            "credentials",
            ProviderStageError(
                stage="credentials",
                detail="`--set-api-key` and `--clear-api-key` cannot be used together.",
                hint="Run one credentials action per command invocation.",
            ),
        )

    credential_store = credential_store_factory()
    if set_api_key:
        prompted_api_key = normalize_optional_string(
            typer.prompt(
                "ElevenLabs API key (hidden input)",
                default="",
                hide_input=True,
                show_default=False,
            )
        )
        if prompted_api_key is None:
            exit_with_command_error(
                "credentials",
                ProviderStageError(
                    stage="credentials",
                    detail="No API key entered.",
                    hint="Provide a non-empty API key when using `--set-api-key`.",
                ),
            )
        try:
            credential_store.set_api_key(prompted_api_key)
        except Exception as exc:
            exit_with_command_error(
                "credentials",
                ProviderStageError(
                    stage="credentials",
                    detail=f"Failed to store API key securely: {exc}",
                    hint="Install and configure a keyring backend and retry.",
                ),
            )
        typer.echo("API key stored in secure credential storage.")
        return

    if clear_api_key:
        removed = credential_store.clear_api_key()
        if removed:
            typer.echo("Stored API key cleared from secure credential storage.")
        else:
            typer.echo("No stored API key found in secure credential storage.")
        return

    availability = "available" if credential_store.is_available() else "unavailable"
    has_stored_key = credential_store.get_api_key() is not None
    status = "present" if has_stored_key else "not set"
    typer.echo(f"Secure credential storage: {availability}")
    typer.echo(f"Stored ElevenLabs API key: {status}")


def main() -> None:
    """CLI entrypoint for console scripts."""
    app()


if __name__ == "__main__":
    main()
