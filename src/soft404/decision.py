# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""Decision policy: accumulated evidence -> final soft-404 verdict.

Thresholds move with content length: the sparser the page, the less
evidence it takes.  Rules are tried in order and the first satisfied one
decides; the fallback demands both confidence and strong evidence.
"""

from __future__ import annotations

from dataclasses import dataclass

from .catalog import PLATFORM_DEFAULT_THRESHOLD
from .scoring import ScoringResult
from .sparsity import SparsityProfile

OVERWHELMING_CONFIDENCE = 80.0
EXPLICIT_404_CONFIDENCE = 40.0
SPARSE_WORD_COUNT = 100
MULTI_INDICATOR_COUNT = 3
MULTI_INDICATOR_RELIEF = 5.0

# (word count upper bound exclusive, threshold, strong indicators required)
_THRESHOLD_BRACKETS: tuple[tuple[int, float, int], ...] = (
    (20, 45.0, 0),
    (50, 50.0, 0),
    (100, 55.0, 1),
    (200, 58.0, 1),
)
DEFAULT_THRESHOLD = 60.0
DEFAULT_STRONG_REQUIREMENT = 1


@dataclass(frozen=True, slots=True)
class ClassificationOutcome:
    """Final verdict handed to the host application."""

    is_404: bool
    confidence: float
    indicators: tuple[str, ...] = ()

    def to_dict(self) -> dict:
        """External contract shape: ``{"is404", "confidence", "indicators"}``."""
        return {"is404": self.is_404, "confidence": self.confidence, "indicators": list(self.indicators)}


def dynamic_threshold(word_count: int) -> tuple[float, int]:
    """(confidence threshold, strong indicators required) for a page length."""
    for upper, threshold, requirement in _THRESHOLD_BRACKETS:
        if word_count < upper:
            return threshold, requirement
    return DEFAULT_THRESHOLD, DEFAULT_STRONG_REQUIREMENT


def decide(result: ScoringResult, sparsity: SparsityProfile, explicit_404_in_text: bool) -> ClassificationOutcome:
    """Apply the ordered decision rules. Never raises."""
    confidence = result.confidence
    threshold, requirement = dynamic_threshold(sparsity.word_count)

    if confidence >= OVERWHELMING_CONFIDENCE:
        is_404 = True
    elif explicit_404_in_text and confidence >= EXPLICIT_404_CONFIDENCE:
        is_404 = True
    elif result.platform_matched:
        # Heavy-chrome platforms: a per-profile bar replaces the length-based one.
        platform_bar = (
            result.platform_threshold if result.platform_threshold is not None else PLATFORM_DEFAULT_THRESHOLD
        )
        is_404 = confidence >= platform_bar
    elif sparsity.word_count < SPARSE_WORD_COUNT and confidence >= threshold:
        is_404 = True
    elif len(result.indicator_trail) >= MULTI_INDICATOR_COUNT and confidence >= threshold - MULTI_INDICATOR_RELIEF:
        is_404 = True
    else:
        is_404 = confidence >= threshold and result.strong_indicator_count >= requirement

    return ClassificationOutcome(is_404=is_404, confidence=confidence, indicators=result.indicator_trail)
