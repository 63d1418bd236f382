"""Voice directory with a TTL-bounded in-memory cache.

Responsibilities:
- Fetch the account's voices and project them onto `Voice` records.
- Serve the cached list while it is non-empty and younger than the TTL.
- Keep the previous list when a refresh fails.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from time import monotonic
from typing import Any, Callable, Mapping, Protocol

from ..models.datatypes import Voice
from ..telemetry.logger import RunLogger

VOICE_CACHE_TTL_SECONDS = 3600.0
_KNOWN_GENDERS = frozenset({"male", "female", "neutral"})


class VoiceSource(Protocol):
    """Anything that can list raw voice records, e.g. `ElevenLabsClient`."""

    def list_voices(self) -> list[dict[str, Any]]:
        """Return raw voice records."""


def voice_from_record(record: Mapping[str, Any]) -> Voice | None:
    """Project one raw `/voices` record onto a `Voice`, or `None` when it has no id."""

    voice_id = record.get("voice_id")
    if not isinstance(voice_id, str) or not voice_id:
        return None
    name = record.get("name")
    labels = record.get("labels")
    if not isinstance(labels, Mapping):
        labels = {}

    language = labels.get("language")
    gender = labels.get("gender")
    if isinstance(gender, str):
        gender = gender.strip().lower()
    description = record.get("description")
    return Voice(
        id=voice_id,
        name=name if isinstance(name, str) else voice_id,
        language=language if isinstance(language, str) and language else None,
        gender=gender if gender in _KNOWN_GENDERS else None,
        description=description if isinstance(description, str) and description else None,
    )


@dataclass(slots=True)
class VoiceDirectory:
    """Cache of available voices, replaced wholesale on every refresh.

    Concurrent cold reads may each trigger a fetch; requests are not coalesced.
    """

    source: VoiceSource
    ttl_seconds: float = VOICE_CACHE_TTL_SECONDS
    clock: Callable[[], float] = monotonic
    run_logger: RunLogger | None = None
    _voices: list[Voice] = field(default_factory=list)
    _fetched_at: float | None = None

    @property
    def voices(self) -> list[Voice]:
        """Return the cached voices without touching the network."""

        return self._voices

    def is_fresh(self) -> bool:
        """Return whether the cache is non-empty and within its TTL."""

        if not self._voices or self._fetched_at is None:
            return False
        return self.clock() - self._fetched_at < self.ttl_seconds

    def list_voices(self) -> list[Voice]:
        """Return cached voices, fetching when the cache is empty or expired."""

        if self.is_fresh():
            return self._voices
        return self.refresh()

    def refresh(self) -> list[Voice]:
        """Fetch voices now and replace the cache; failures leave the cache untouched."""

        fetched_at = self.clock()
        records = self.source.list_voices()
        voices = [
            voice for voice in (voice_from_record(record) for record in records) if voice
        ]
        self._voices = voices
        self._fetched_at = fetched_at
        if self.run_logger is not None:
            self.run_logger.log_voices_refreshed(len(voices))
        return voices
