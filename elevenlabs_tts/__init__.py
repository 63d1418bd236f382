"""Top-level package for the ElevenLabs text-to-speech provider.

This package turns text, optionally prefixed with a one-line JSON voice
directive, into audio via the ElevenLabs API. The main entry points are
`ElevenLabsTTSProvider` and the host-facing `plugin` object.
"""

from .api.client import ElevenLabsProviderError
from .errors import ConfigurationError, ProviderStageError, VoiceRequiredError
from .models.datatypes import SynthesisResult, TTSOptions, Voice
from .plugin import ElevenLabsPlugin, plugin
from .tts.provider import ElevenLabsTTSProvider

__all__ = [
    "ConfigurationError",
    "ElevenLabsPlugin",
    "ElevenLabsProviderError",
    "ElevenLabsTTSProvider",
    "ProviderStageError",
    "SynthesisResult",
    "TTSOptions",
    "Voice",
    "VoiceRequiredError",
    "__version__",
    "plugin",
]

__version__ = "1.0.0"
