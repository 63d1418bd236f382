"""Telemetry helpers.

This package emits deterministic call-level log events.
"""

from .logger import RunLogger

__all__ = ["RunLogger"]
