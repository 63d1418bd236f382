"""Instant voice cloning from reference audio.

Responsibilities:
- Create a cloned voice from a reference audio sample.
- Reuse the cloned voice id for identical audio within the process lifetime.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from hashlib import sha256
from typing import Protocol


class CloneTarget(Protocol):
    """Anything that can create a voice from audio, e.g. `ElevenLabsClient`."""

    def add_voice(self, *, name: str, audio: bytes, filename: str = ...) -> str:
        """Create a voice and return its id."""


@dataclass(slots=True)
class VoiceCloner:
    """Clone voices on demand, memoized by reference audio content hash."""

    target: CloneTarget
    name_prefix: str = "clone"
    _voice_ids: dict[str, str] = field(default_factory=dict)

    @staticmethod
    def fingerprint(reference_audio: bytes) -> str:
        """Return the SHA-256 hex digest identifying a reference sample."""

        return sha256(reference_audio).hexdigest()

    def resolve(self, reference_audio: bytes) -> str:
        """Return the voice id for `reference_audio`, cloning it on first use."""

        key = self.fingerprint(reference_audio)
        cached = self._voice_ids.get(key)
        if cached is not None:
            return cached
        voice_id = self.target.add_voice(
            name=f"{self.name_prefix}-{key[:12]}",
            audio=reference_audio,
        )
        self._voice_ids[key] = voice_id
        return voice_id

    @property
    def cloned_count(self) -> int:
        return len(self._voice_ids)
