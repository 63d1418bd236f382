"""Audio format mapping between the host contract and ElevenLabs output formats."""

from __future__ import annotations

import re

DEFAULT_OUTPUT_FORMAT = "pcm_44100"
DEFAULT_SAMPLE_RATE = 44100
DEFAULT_AUDIO_FORMAT = "pcm_s16le"

# ElevenLabs has no Opus output; u-law is the closest compact telephony format.
_AUDIO_FORMAT_TO_OUTPUT_FORMAT = {
    "pcm_s16le": "pcm_44100",
    "mp3": "mp3_44100_128",
    "opus": "ulaw_8000",
    "ogg_opus": "ulaw_8000",
}

AUDIO_FORMATS = tuple(_AUDIO_FORMAT_TO_OUTPUT_FORMAT)

OUTPUT_FORMATS = (
    "pcm_16000",
    "pcm_22050",
    "pcm_24000",
    "pcm_44100",
    "mp3_22050_32",
    "mp3_44100_32",
    "mp3_44100_64",
    "mp3_44100_96",
    "mp3_44100_128",
    "mp3_44100_192",
    "ulaw_8000",
)

_DIGITS_PATTERN = re.compile(r"\d+")


def map_audio_format(audio_format: str | None) -> str:
    """Return the provider output format for a caller audio format tag."""

    if not audio_format:
        return DEFAULT_OUTPUT_FORMAT
    return _AUDIO_FORMAT_TO_OUTPUT_FORMAT.get(audio_format, DEFAULT_OUTPUT_FORMAT)


def parse_sample_rate(output_format: str) -> int:
    """Extract the sample rate from the first digit run of an output format string."""

    match = _DIGITS_PATTERN.search(output_format)
    if match is None:
        return DEFAULT_SAMPLE_RATE
    return int(match.group(0))
