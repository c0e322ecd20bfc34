"""Overall confidence for a research report.

The overall score is the mean of whichever signals are present, not their
sum, so a strong foundation match is not inflated by a long event list:

- the foundation's own resolution confidence, when positive
- ``weights.events_found`` once at least one event survived filtering
- ``weights.contacts_found`` once at least one contact survived filtering

With no signal at all the score falls back to ``weights.default_overall``.
"""
from __future__ import annotations

import math

from foundation_scout.config import ConfidenceWeights


def contributions(foundation_confidence: int, events_count: int, contacts_count: int,
                  weights: ConfidenceWeights) -> list[int]:
    values: list[int] = []
    if foundation_confidence > 0:
        values.append(foundation_confidence)
    if events_count > 0:
        values.append(weights.events_found)
    if contacts_count > 0:
        values.append(weights.contacts_found)
    return values


def overall_confidence(foundation_confidence: int, events_count: int, contacts_count: int,
                       weights: ConfidenceWeights | None = None) -> int:
    weights = weights or ConfidenceWeights()
    values = contributions(foundation_confidence, events_count, contacts_count, weights)
    if not values:
        return weights.default_overall
    mean = sum(values) / len(values)
    return max(0, min(100, math.floor(mean + 0.5)))  # half rounds up, unlike round()
