"""Low-level arithmetic shared by the analysis builders.

Pure functions: no I/O, no Pydantic models.  Higher-level code
(aggregation, trends, graph) calls these.
"""

from __future__ import annotations

from collections.abc import Sequence

# Largest possible population variance of values confined to [0, 1]
MAX_UNIT_VARIANCE = 0.25


def clamp(value: float, low: float = 0.0, high: float = 1.0) -> float:
    return max(low, min(high, value))


def normalize_intensity(raw: float) -> float:
    """Map a raw intensity onto 0–1.

    Values above 1 are read as percentages and divided by 100; the result
    is clamped.  Values already in [0, 1] pass through unchanged.
    """
    value = raw / 100 if raw > 1 else raw
    return clamp(value)


def mean(values: Sequence[float]) -> float:
    """Arithmetic mean.  Returns 0 for an empty sequence."""
    if not values:
        return 0.0
    return sum(values) / len(values)


def population_variance(values: Sequence[float]) -> float:
    """Population variance (divide by N).  Returns 0 for fewer than 2 values."""
    if len(values) < 2:
        return 0.0
    m = mean(values)
    return sum((v - m) ** 2 for v in values) / len(values)


def stability_index(values: Sequence[float]) -> float:
    """``1 - variance / max_variance`` for values in [0, 1], clamped to [0, 1].

    One reading is perfectly stable (1.0); no readings give 0.0.
    """
    if not values:
        return 0.0
    return clamp(1.0 - population_variance(values) / MAX_UNIT_VARIANCE)


def relative_change(before: float, after: float) -> float:
    """``(after - before) / before``.

    When *before* is 0 the change is +1.0 if *after* grew, else 0.0.
    """
    if before == 0:
        return 1.0 if after > 0 else 0.0
    return (after - before) / before


def scale_to_range(value: float, offset: float, factor: float, low: float, high: float) -> float:
    """Linear ``offset + value * factor`` clamped to ``[low, high]``."""
    return clamp(offset + value * factor, low, high)
