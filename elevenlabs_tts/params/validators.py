"""Scalar voice-parameter validators.

Every validator is total: out-of-range input is clamped, non-numeric or NaN
input is treated as absent, and nothing here raises. Malformed voice
parameters must never abort a synthesis call.
"""

from __future__ import annotations

import math

DISCRETE_STABILITY_MODEL = "eleven_v3"
DISCRETE_STABILITY_STEPS = (0.0, 0.5, 1.0)
MAX_SEED = 4294967295
MAX_LATENCY_TIER = 4
MIN_SPEED = 0.25
MAX_SPEED = 4.0
BASELINE_WPM = 150.0


def _as_number(value: object) -> float | None:
    """Return a float for real numeric input, `None` for anything else or NaN."""

    if value is None or isinstance(value, bool) or not isinstance(value, int | float):
        return None
    try:
        number = float(value)
    except OverflowError:
        number = math.inf if value > 0 else -math.inf
    if math.isnan(number):
        return None
    return number


def _clamp(value: float, lower: float, upper: float) -> float:
    return max(lower, min(upper, value))


def validate_stability(value: object, model_id: str | None = None) -> float | None:
    """Clamp stability to [0, 1], or snap to 0/0.5/1 for the discrete-stability model.

    Snapping scans candidates in ascending order and only replaces the current
    best on a strictly smaller distance, so exact ties keep the lower value
    (0.25 -> 0.0, 0.75 -> 0.5).
    """

    number = _as_number(value)
    if number is None:
        return None
    bounded = _clamp(number, 0.0, 1.0)
    if model_id == DISCRETE_STABILITY_MODEL:
        closest = DISCRETE_STABILITY_STEPS[0]
        for candidate in DISCRETE_STABILITY_STEPS[1:]:
            if abs(candidate - bounded) < abs(closest - bounded):
                closest = candidate
        return closest
    return bounded


def validate_unit(value: object) -> float | None:
    """Clamp a unit-range value such as similarity boost or style to [0, 1]."""

    number = _as_number(value)
    if number is None:
        return None
    return _clamp(number, 0.0, 1.0)


def validate_seed(value: object) -> int | None:
    """Clamp a seed to [0, 4294967295] and floor non-integer input."""

    number = _as_number(value)
    if number is None:
        return None
    return math.floor(_clamp(number, 0.0, float(MAX_SEED)))


def validate_latency_tier(value: object) -> int | None:
    """Clamp a streaming latency tier to [0, 4] and floor non-integer input."""

    number = _as_number(value)
    if number is None:
        return None
    return math.floor(_clamp(number, 0.0, float(MAX_LATENCY_TIER)))


def resolve_speed(speed: object = None, rate: object = None) -> float | None:
    """Resolve a speed multiplier from an explicit speed or a words-per-minute rate.

    An explicit speed always wins and `rate` is ignored. A rate is converted
    against a 150 WPM baseline. Both paths clamp to [0.25, 4.0].
    """

    speed_value = _as_number(speed)
    if speed_value is not None:
        return _clamp(speed_value, MIN_SPEED, MAX_SPEED)
    rate_value = _as_number(rate)
    if rate_value is not None:
        return _clamp(rate_value / BASELINE_WPM, MIN_SPEED, MAX_SPEED)
    return None
