"""Unit tests for provider configuration precedence and loaders."""

from __future__ import annotations

from pathlib import Path

import pytest

from elevenlabs_tts.config import (
    ConfigLoader,
    ProviderConfig,
    RuntimeConfigSources,
    resolve_provider_config,
)
from elevenlabs_tts.errors import ConfigurationError


def test_resolve_provider_config_precedence_explicit_secure_env() -> None:
    """Explicit values should win over secure values, which win over env values."""

    config = resolve_provider_config(
        RuntimeConfigSources(
            explicit={"default_voice_id": "explicit-voice"},
            secure={"api_key": "secure-key", "default_voice_id": "secure-voice"},
            env={
                "ELEVENLABS_API_KEY": "env-key",
                "ELEVENLABS_VOICE_ID": "env-voice",
                "ELEVENLABS_MODEL_ID": "eleven_multilingual_v2",
            },
        )
    )

    assert config.api_key == "secure-key"
    assert config.default_voice_id == "explicit-voice"
    assert config.default_model_id == "eleven_multilingual_v2"


def test_resolve_provider_config_blank_values_fall_through() -> None:
    """Blank higher-precedence values should not mask lower-precedence ones."""

    config = resolve_provider_config(
        RuntimeConfigSources(
            explicit={"api_key": "   "},
            env={"ELEVENLABS_API_KEY": "env-key"},
        )
    )

    assert config.api_key == "env-key"


def test_resolve_provider_config_defaults() -> None:
    """Unset settings should use built-in defaults."""

    config = resolve_provider_config(RuntimeConfigSources(explicit={"api_key": "k"}))

    assert config.default_voice_id is None
    assert config.default_model_id == "eleven_turbo_v2_5"
    assert config.stability == 0.5
    assert config.similarity_boost == 0.75
    assert config.style is None
    assert config.speaker_boost is True
    assert config.output_format is None
    assert config.base_url == "https://api.elevenlabs.io/v1"
    assert config.timeout_seconds == 60.0


def test_resolve_provider_config_accepts_camel_case_host_settings() -> None:
    """Host settings with camelCase keys should map onto canonical names."""

    config = resolve_provider_config(
        RuntimeConfigSources(
            explicit={
                "apiKey": "k",
                "defaultVoiceId": "v",
                "speakerBoost": False,
                "baseUrl": "https://proxy.example/v1/",
            }
        )
    )

    assert config.default_voice_id == "v"
    assert config.speaker_boost is False
    assert config.base_url == "https://proxy.example/v1"


def test_missing_api_key_raises_configuration_error() -> None:
    """Construction without any API key should fail with a config-stage error."""

    with pytest.raises(ConfigurationError, match="ELEVENLABS_API_KEY is required") as exc_info:
        ConfigLoader.from_env(env={})

    assert exc_info.value.stage == "config"


def test_from_env_snapshots_environment_once() -> None:
    """Later environment changes should not leak into an existing config."""

    env = {"ELEVENLABS_API_KEY": "first-key", "ELEVENLABS_VOICE_ID": "v1"}
    config = ConfigLoader.from_env(env=env)
    env["ELEVENLABS_VOICE_ID"] = "v2"

    assert config.default_voice_id == "v1"


def test_provider_config_repr_hides_api_key() -> None:
    """The API key should never appear in the config representation."""

    config = ProviderConfig(api_key="sk_supersecretvalue")

    assert "sk_supersecretvalue" not in repr(config)
    assert "sk_supersecretvalue" not in str(config.as_public_metadata())


def test_provider_config_rejects_non_positive_timeout() -> None:
    """Timeouts must be positive."""

    with pytest.raises(ValueError, match="timeout_seconds"):
        ProviderConfig(api_key="k", timeout_seconds=0)


def test_config_loader_from_yaml_loads_and_normalizes(tmp_path: Path) -> None:
    """YAML loader should accept canonical and camelCase keys and drop nulls."""

    config_path = tmp_path / "elevenlabs.yaml"
    config_path.write_text(
        "\n".join(
            [
                "defaultVoiceId: yaml-voice",
                "stability: 0.3",
                "speaker_boost: off",
                "output_format: mp3_44100_128",
                "style: null",
            ]
        ),
        encoding="utf-8",
    )

    explicit = ConfigLoader.from_yaml(config_path)
    config = ConfigLoader.from_env(env={"ELEVENLABS_API_KEY": "k"}, explicit=explicit)

    assert explicit["default_voice_id"] == "yaml-voice"
    assert "style" not in explicit
    assert config.stability == 0.3
    assert config.speaker_boost is False
    assert config.output_format == "mp3_44100_128"


def test_config_loader_from_yaml_rejects_unknown_keys(tmp_path: Path) -> None:
    """Unknown YAML keys should be reported instead of silently ignored."""

    config_path = tmp_path / "elevenlabs.yaml"
    config_path.write_text("voice: x\nbogus: 1\n", encoding="utf-8")

    with pytest.raises(ValueError, match="unsupported key\\(s\\): bogus, voice"):
        ConfigLoader.from_yaml(config_path)


def test_config_loader_from_yaml_requires_mapping(tmp_path: Path) -> None:
    """A YAML list at top level should be rejected."""

    config_path = tmp_path / "elevenlabs.yaml"
    config_path.write_text("- a\n- b\n", encoding="utf-8")

    with pytest.raises(ValueError, match="top-level mapping"):
        ConfigLoader.from_yaml(config_path)


def test_invalid_numeric_setting_raises_value_error() -> None:
    """Non-numeric numeric settings should fail with a field-specific message."""

    with pytest.raises(ValueError, match="`stability` must be a number"):
        resolve_provider_config(
            RuntimeConfigSources(explicit={"api_key": "k", "stability": "high"})
        )
