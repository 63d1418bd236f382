"""Text-to-speech provider implementation.

This package contains the synthesis orchestrator, the voice directory, and
reference-audio voice cloning.
"""

from .cloning import VoiceCloner
from .provider import ElevenLabsTTSProvider, TTSProvider, build_speech_request
from .voices import VoiceDirectory

__all__ = [
    "ElevenLabsTTSProvider",
    "TTSProvider",
    "VoiceCloner",
    "VoiceDirectory",
    "build_speech_request",
]
