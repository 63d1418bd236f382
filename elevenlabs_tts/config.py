"""Provider configuration model and loaders.

Responsibilities:
- Define process-lifetime provider configuration as a frozen dataclass.
- Provide deterministic precedence resolution across explicit, secure, and env sources.
- Provide loader entry points for YAML- and environment-based configuration.

Key types:
- `ProviderConfig`: immutable settings captured once at provider construction.
- `RuntimeConfigSources`: optional value sources for precedence resolution.
- `ConfigLoader`: static construction helpers.
"""

from __future__ import annotations

from dataclasses import dataclass, field
import os
from pathlib import Path
from typing import Any, Mapping

import yaml

from .errors import ConfigurationError
from .parsing import (
    normalize_optional_string,
    parse_required_boolean,
    parse_required_float,
)


DEFAULT_MODEL_ID = "eleven_turbo_v2_5"
DEFAULT_BASE_URL = "https://api.elevenlabs.io/v1"
DEFAULT_TIMEOUT_SECONDS = 60.0
DEFAULT_STABILITY = 0.5
DEFAULT_SIMILARITY_BOOST = 0.75
DEFAULT_SPEAKER_BOOST = True

API_KEY_ENV = "ELEVENLABS_API_KEY"

_ENV_KEYS = {
    "api_key": API_KEY_ENV,
    "default_voice_id": "ELEVENLABS_VOICE_ID",
    "default_model_id": "ELEVENLABS_MODEL_ID",
    "output_format": "ELEVENLABS_OUTPUT_FORMAT",
    "base_url": "ELEVENLABS_BASE_URL",
}

_SETTING_KEY_ALIASES = {
    "apiKey": "api_key",
    "defaultVoiceId": "default_voice_id",
    "defaultModelId": "default_model_id",
    "similarityBoost": "similarity_boost",
    "speakerBoost": "speaker_boost",
    "outputFormat": "output_format",
    "baseUrl": "base_url",
    "timeoutSeconds": "timeout_seconds",
}

SUPPORTED_SETTING_KEYS = frozenset(
    {
        "api_key",
        "default_voice_id",
        "default_model_id",
        "stability",
        "similarity_boost",
        "style",
        "speaker_boost",
        "output_format",
        "base_url",
        "timeout_seconds",
    }
)


@dataclass(frozen=True, slots=True)
class RuntimeConfigSources:
    """Source mappings used for deterministic value precedence.

    Attributes:
        explicit: Values passed directly by the host, a config file, or CLI flags.
        secure: Values loaded from secure local credential storage.
        env: Values loaded from environment variables.
    """

    explicit: Mapping[str, Any] = field(default_factory=dict)
    secure: Mapping[str, str] = field(default_factory=dict)
    env: Mapping[str, str] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class ProviderConfig:
    """Immutable provider settings.

    Attributes:
        api_key: ElevenLabs API key; required and never included in `repr`.
        default_voice_id: Voice used when neither directive nor options name one.
        default_model_id: Model used when neither directive nor options name one.
        stability: Default voice stability.
        similarity_boost: Default similarity boost.
        style: Default style exaggeration; unset by default.
        speaker_boost: Default speaker boost flag.
        output_format: Default provider output format; unset maps the caller format.
        base_url: REST API base URL.
        timeout_seconds: Transport-level request timeout.
    """

    api_key: str = field(repr=False)
    default_voice_id: str | None = None
    default_model_id: str = DEFAULT_MODEL_ID
    stability: float | None = DEFAULT_STABILITY
    similarity_boost: float | None = DEFAULT_SIMILARITY_BOOST
    style: float | None = None
    speaker_boost: bool | None = DEFAULT_SPEAKER_BOOST
    output_format: str | None = None
    base_url: str = DEFAULT_BASE_URL
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS

    def __post_init__(self) -> None:
        if normalize_optional_string(self.api_key) is None:
            raise ConfigurationError(
                f"{API_KEY_ENV} is required",
                hint=f"Set `{API_KEY_ENV}` or pass `api_key` explicitly.",
            )
        if self.timeout_seconds <= 0:
            raise ValueError("`timeout_seconds` must be a positive number.")

    def as_public_metadata(self) -> dict[str, str]:
        """Return non-secret settings safe to print or expose to tool callers."""

        return {
            "default_voice_id": self.default_voice_id or "",
            "default_model_id": self.default_model_id,
            "output_format": self.output_format or "",
            "base_url": self.base_url,
        }


def normalize_setting_keys(payload: Mapping[str, Any]) -> dict[str, Any]:
    """Map camelCase host setting keys onto canonical snake_case keys."""

    return {_SETTING_KEY_ALIASES.get(key, key): value for key, value in payload.items()}


def resolve_provider_config(sources: RuntimeConfigSources | None = None) -> ProviderConfig:
    """Resolve provider settings with deterministic source precedence.

    Precedence for each key is `explicit` > `secure` > `env` > built-in default.
    """

    resolved_sources = sources if sources is not None else RuntimeConfigSources()
    explicit = normalize_setting_keys(resolved_sources.explicit)
    sources = RuntimeConfigSources(
        explicit=explicit,
        secure=resolved_sources.secure,
        env=resolved_sources.env,
    )

    api_key = _resolve_optional_value("api_key", sources) or ""
    default_model_id = _resolve_optional_value("default_model_id", sources) or DEFAULT_MODEL_ID
    base_url = _resolve_optional_value("base_url", sources) or DEFAULT_BASE_URL

    return ProviderConfig(
        api_key=api_key,
        default_voice_id=_resolve_optional_value("default_voice_id", sources),
        default_model_id=default_model_id,
        stability=_resolve_optional_float("stability", sources, DEFAULT_STABILITY),
        similarity_boost=_resolve_optional_float(
            "similarity_boost", sources, DEFAULT_SIMILARITY_BOOST
        ),
        style=_resolve_optional_float("style", sources, None),
        speaker_boost=_resolve_bool("speaker_boost", sources, DEFAULT_SPEAKER_BOOST),
        output_format=_resolve_optional_value("output_format", sources),
        base_url=base_url.rstrip("/"),
        timeout_seconds=_resolve_optional_float(
            "timeout_seconds", sources, DEFAULT_TIMEOUT_SECONDS
        ),
    )


def _resolve_optional_value(key: str, sources: RuntimeConfigSources) -> str | None:
    """Return the first non-blank value for `key` in precedence order."""

    for mapping, lookup_key in (
        (sources.explicit, key),
        (sources.secure, key),
        (sources.env, _ENV_KEYS.get(key)),
    ):
        if lookup_key is None or lookup_key not in mapping:
            continue
        value = normalize_optional_string(mapping.get(lookup_key))
        if value is not None:
            return value
    return None


def _resolve_optional_float(
    key: str, sources: RuntimeConfigSources, default_value: float | None
) -> float | None:
    value = _resolve_optional_value(key, sources)
    if value is None:
        return default_value
    return parse_required_float(value, key)


def _resolve_bool(key: str, sources: RuntimeConfigSources, default_value: bool) -> bool:
    explicit_value = sources.explicit.get(key)
    if isinstance(explicit_value, bool):
        return explicit_value
    value = _resolve_optional_value(key, sources)
    if value is None:
        return default_value
    return parse_required_boolean(value, key)


class ConfigLoader:
    """Factory methods for creating provider settings from external sources."""

    @staticmethod
    def from_yaml(path: Path) -> dict[str, Any]:
        """Load explicit provider settings from a YAML file.

        Returns a normalized mapping suitable for `RuntimeConfigSources.explicit`.
        """

        path_text = path.read_text(encoding="utf-8")
        payload = yaml.safe_load(path_text)
        if payload is None:
            payload = {}
        if not isinstance(payload, Mapping):
            raise ValueError(f"YAML config `{path}` must contain a top-level mapping/object.")

        normalized = normalize_setting_keys(payload)
        unknown = sorted(set(normalized).difference(SUPPORTED_SETTING_KEYS))
        if unknown:
            key_list = ", ".join(unknown)
            raise ValueError(f"YAML `{path}` includes unsupported key(s): {key_list}.")
        return {
            key: value for key, value in normalized.items() if value is not None
        }

    @staticmethod
    def from_env(
        env: Mapping[str, str] | None = None,
        explicit: Mapping[str, Any] | None = None,
        secure: Mapping[str, str] | None = None,
    ) -> ProviderConfig:
        """Create a provider config, reading the environment exactly once.

        The environment mapping is copied, so later changes to `os.environ`
        never leak into an already constructed config.
        """

        env_map: Mapping[str, str] = os.environ if env is None else env
        env_snapshot = {
            env_key: env_map[env_key]
            for env_key in _ENV_KEYS.values()
            if env_key in env_map
        }
        return resolve_provider_config(
            RuntimeConfigSources(
                explicit=dict(explicit or {}),
                secure=dict(secure or {}),
                env=env_snapshot,
            )
        )
