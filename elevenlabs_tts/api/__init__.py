"""Remote ElevenLabs REST API access."""

from .client import ElevenLabsClient, ElevenLabsProviderError

__all__ = ["ElevenLabsClient", "ElevenLabsProviderError"]
