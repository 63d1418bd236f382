"""Shared typed data models for the ElevenLabs provider.

This package contains dataclasses used across provider modules to avoid
cross-module coupling and circular imports.
"""

from .datatypes import (
    InstallStep,
    ModelInfo,
    ResolvedOptions,
    SpeechRequest,
    SynthesisResult,
    TTSOptions,
    Voice,
    VoiceDirective,
    VoicePluginMetadata,
)

__all__ = [
    "InstallStep",
    "ModelInfo",
    "ResolvedOptions",
    "SpeechRequest",
    "SynthesisResult",
    "TTSOptions",
    "Voice",
    "VoiceDirective",
    "VoicePluginMetadata",
]
