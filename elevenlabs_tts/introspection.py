"""Read-only introspection tools for hosts and UIs.

Responsibilities:
- Declare the read-only tools exposed by the plugin manifest.
- Report provider status, voices, and models without exposing credentials.

Key public functions:
- `get_tool_declarations`: static tool declarations.
- `get_tool_handlers`: handlers bound to a live provider.
"""

from __future__ import annotations

from typing import Any, Callable, Mapping

from .models.datatypes import ModelInfo
from .tts.provider import ElevenLabsTTSProvider

TOOL_PREFIX = "elevenlabs-tts"
GET_STATUS_TOOL = f"{TOOL_PREFIX}.getStatus"
LIST_VOICES_TOOL = f"{TOOL_PREFIX}.listVoices"
LIST_MODELS_TOOL = f"{TOOL_PREFIX}.listModels"

MODEL_CATALOG: tuple[ModelInfo, ...] = (
    ModelInfo(id="eleven_v3", name="Eleven v3", description="Latest model with highest quality"),
    ModelInfo(
        id="eleven_turbo_v2_5",
        name="Eleven Turbo v2.5",
        description="Fast, high quality (recommended)",
    ),
    ModelInfo(id="eleven_turbo_v2", name="Eleven Turbo v2", description="Fast generation"),
    ModelInfo(
        id="eleven_monolingual_v1",
        name="Eleven Monolingual v1",
        description="English only",
    ),
    ModelInfo(
        id="eleven_multilingual_v2",
        name="Eleven Multilingual v2",
        description="Multi-language support",
    ),
    ModelInfo(
        id="eleven_multilingual_v1",
        name="Eleven Multilingual v1",
        description="Legacy multi-language",
    ),
)

ToolHandler = Callable[[Mapping[str, Any]], dict[str, Any]]


def get_tool_declarations() -> list[dict[str, Any]]:
    """Return manifest declarations for the read-only tools."""

    empty_schema = {"type": "object", "properties": {}}
    return [
        {
            "name": GET_STATUS_TOOL,
            "description": "Get status of the ElevenLabs TTS provider",
            "inputSchema": dict(empty_schema),
            "annotations": {"readOnlyHint": True},
        },
        {
            "name": LIST_VOICES_TOOL,
            "description": "List available ElevenLabs TTS voices",
            "inputSchema": {
                "type": "object",
                "properties": {
                    "language": {
                        "type": "string",
                        "description": "Filter by language code (e.g. 'en'). Omit for all.",
                    }
                },
            },
            "annotations": {"readOnlyHint": True},
        },
        {
            "name": LIST_MODELS_TOOL,
            "description": "List available ElevenLabs TTS models",
            "inputSchema": dict(empty_schema),
            "annotations": {"readOnlyHint": True},
        },
    ]


def get_status(provider: ElevenLabsTTSProvider) -> dict[str, Any]:
    """Return provider metadata with a live health probe and the cached voice count."""

    metadata = provider.metadata
    return {
        "provider": metadata.name,
        "type": metadata.type,
        "version": metadata.version,
        "description": metadata.description,
        "local": metadata.local,
        "capabilities": list(metadata.capabilities),
        "healthy": provider.health_check(),
        "voice_count": len(provider.voices),
    }


def list_voices(
    provider: ElevenLabsTTSProvider,
    language: str | None = None,
) -> dict[str, Any]:
    """List voices, fetching only when nothing is cached yet.

    `language` is a case-insensitive prefix, so `en` matches `en-US`.
    """

    voices = provider.voices
    if not voices:
        voices = provider.fetch_voices()
    if language:
        prefix = language.lower()
        voices = [
            voice
            for voice in voices
            if voice.language is not None and voice.language.lower().startswith(prefix)
        ]
    return {
        "provider": provider.metadata.name,
        "count": len(voices),
        "voices": [voice.as_dict() for voice in voices],
    }


def list_models(provider: ElevenLabsTTSProvider) -> dict[str, Any]:
    """Return the static model catalog and the provider's default model."""

    return {
        "provider": provider.metadata.name,
        "models": [
            {"id": model.id, "name": model.name, "description": model.description}
            for model in MODEL_CATALOG
        ],
        "current_model": provider.current_model_id,
    }


def get_tool_handlers(provider: ElevenLabsTTSProvider) -> dict[str, ToolHandler]:
    """Bind tool handlers to a live provider; handlers accept the tool input mapping."""

    def _list_voices_handler(tool_input: Mapping[str, Any]) -> dict[str, Any]:
        language = tool_input.get("language")
        return list_voices(provider, language if isinstance(language, str) else None)

    return {
        GET_STATUS_TOOL: lambda tool_input: get_status(provider),
        LIST_VOICES_TOOL: _list_voices_handler,
        LIST_MODELS_TOOL: lambda tool_input: list_models(provider),
    }
