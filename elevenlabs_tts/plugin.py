"""Host plugin registration for the ElevenLabs TTS provider.

Responsibilities:
- Describe the plugin manifest: provided capabilities and config schema.
- Register the provider with a host context on init and reverse it on shutdown.
- Expose read-only introspection tools bound to the live provider.

Key public objects:
- `ElevenLabsPlugin`: lifecycle wrapper around one provider instance.
- `plugin`: the default instance hosts load.
"""

from __future__ import annotations

from typing import Any, Callable, Protocol

from .api.client import ElevenLabsProviderError
from .introspection import ToolHandler, get_tool_declarations, get_tool_handlers
from .telemetry.logger import RunLogger
from .tts.provider import PROVIDER_METADATA, ElevenLabsTTSProvider

PLUGIN_NAME = "voice-elevenlabs-tts"
PLUGIN_VERSION = "1.0.0"
PLUGIN_DESCRIPTION = "ElevenLabs high-quality text-to-speech"
EXTENSION_NAME = "tts"

CONFIG_SCHEMA: dict[str, Any] = {
    "title": "ElevenLabs TTS",
    "description": "Configure ElevenLabs text-to-speech",
    "fields": [
        {
            "name": "apiKey",
            "type": "password",
            "label": "API Key",
            "placeholder": "sk_...",
            "required": True,
            "secret": True,
            "setup_flow": "paste",
            "description": "ElevenLabs API key from https://elevenlabs.io",
        },
        {
            "name": "defaultVoiceId",
            "type": "text",
            "label": "Default Voice ID",
            "required": False,
            "description": "Voice used when a request does not name one",
        },
        {
            "name": "defaultModelId",
            "type": "text",
            "label": "Default Model",
            "required": False,
            "default": "eleven_turbo_v2_5",
            "description": "Model used when a request does not name one",
        },
    ],
}

MANIFEST: dict[str, Any] = {
    "provides": {
        "capabilities": [{"type": EXTENSION_NAME, "id": PROVIDER_METADATA.name}],
    },
    "config_schema": CONFIG_SCHEMA,
}


class PluginContext(Protocol):
    """Host services a plugin registers with.

    Only extension registration is required. Hosts may additionally offer
    `register_config_schema`/`unregister_config_schema` and
    `register_capability_provider`/`unregister_capability_provider`.
    """

    def register_extension(self, name: str, extension: Any) -> None:
        """Expose `extension` to other plugins under `name`."""

    def unregister_extension(self, name: str) -> None:
        """Remove a previously registered extension."""


class ElevenLabsPlugin:
    """Lifecycle wrapper that owns at most one live provider."""

    name = PLUGIN_NAME
    version = PLUGIN_VERSION
    description = PLUGIN_DESCRIPTION
    manifest = MANIFEST

    def __init__(
        self,
        provider_factory: Callable[[], ElevenLabsTTSProvider] | None = None,
        run_logger: RunLogger | None = None,
    ) -> None:
        self._run_logger = run_logger or RunLogger()
        self._provider_factory = provider_factory or self._provider_from_env
        self._provider: ElevenLabsTTSProvider | None = None
        self._ctx: PluginContext | None = None
        self._capability_registered = False

    def _provider_from_env(self) -> ElevenLabsTTSProvider:
        return ElevenLabsTTSProvider(run_logger=self._run_logger)

    @property
    def provider(self) -> ElevenLabsTTSProvider | None:
        return self._provider

    def init(self, ctx: PluginContext) -> None:
        """Create the provider and register it with `ctx`.

        Raises:
            ConfigurationError: If no API key is configured.
        """

        provider = self._provider_factory()
        self._provider = provider
        self._ctx = ctx

        try:
            provider.fetch_voices()
        except ElevenLabsProviderError as exc:
            self._run_logger.log_warning(
                "voices",
                "warmup_failed",
                failure_kind=exc.failure_kind,
            )

        ctx.register_extension(EXTENSION_NAME, provider)
        register_schema = getattr(ctx, "register_config_schema", None)
        if callable(register_schema):
            register_schema(PLUGIN_NAME, CONFIG_SCHEMA)

        register_capability = getattr(ctx, "register_capability_provider", None)
        if callable(register_capability):
            try:
                register_capability(
                    EXTENSION_NAME,
                    {
                        "id": provider.metadata.name,
                        "name": provider.metadata.description or provider.metadata.name,
                    },
                )
                self._capability_registered = True
            except Exception as exc:
                self._run_logger.log_warning(
                    "plugin",
                    "capability_registration_failed",
                    error_type=type(exc).__name__,
                )

    def get_manifest(self) -> dict[str, Any]:
        """Return tool declarations for the host manifest."""

        return {"tools": get_tool_declarations()}

    def get_tool_handlers(self) -> dict[str, ToolHandler]:
        """Return handlers bound to the live provider, or nothing before `init`."""

        if self._provider is None:
            return {}
        return get_tool_handlers(self._provider)

    def shutdown(self) -> None:
        """Reverse registration and release the provider; safe to call repeatedly."""

        ctx = self._ctx
        if ctx is not None:
            if self._capability_registered:
                unregister_capability = getattr(ctx, "unregister_capability_provider", None)
                if callable(unregister_capability):
                    unregister_capability(EXTENSION_NAME, PROVIDER_METADATA.name)
            ctx.unregister_extension(EXTENSION_NAME)
            unregister_schema = getattr(ctx, "unregister_config_schema", None)
            if callable(unregister_schema):
                unregister_schema(PLUGIN_NAME)
        if self._provider is not None:
            self._provider.shutdown()
        self._ctx = None
        self._provider = None
        self._capability_registered = False


plugin = ElevenLabsPlugin()
