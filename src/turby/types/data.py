"""Measurement records produced by the controllers."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Sample:
    """One turbidity reading taken during a dissociation cycle.

    Attributes
    ----------
    elapsed_ms : int
        Milliseconds since the start of the run.
    intensity : float
        Raw visible-light reading, in sensor-native counts.
    """

    elapsed_ms: int
    intensity: float


@dataclass(frozen=True)
class LabeledSample:
    """One manual reading, keyed by an operator-entered label."""

    label: str
    intensity: float


# ordered, append-only
SampleSeries = list[Sample]
LabeledSeries = list[LabeledSample]
