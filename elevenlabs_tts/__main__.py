"""Module entrypoint for running the CLI as ``python -m elevenlabs_tts``."""

from __future__ import annotations

from elevenlabs_tts.cli import main


if __name__ == "__main__":
    main()
