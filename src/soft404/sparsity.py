# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""Content sparsity analysis.

Error pages say little.  Word, vocabulary and sentence statistics of the
visible body text give a sparsity score (added straight to confidence) and a
multiplier that amplifies pattern weights on thin pages and damps them on
long ones.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

_SENTENCE_END_RE = re.compile(r"[.!?]+")

MIN_TOKEN_LENGTH = 3

# (upper bound exclusive, score, multiplier, note template); first match wins.
_SPARSITY_BRACKETS: tuple[tuple[int, float, float, str], ...] = (
    (20, 35.0, 2.0, "Extremely sparse content: {n} words"),
    (50, 25.0, 1.5, "Very sparse content: {n} words"),
    (100, 15.0, 1.2, "Sparse content: {n} words"),
    (200, 5.0, 1.0, "Limited content: {n} words"),
)

SUBSTANTIAL_WORD_COUNT = 500
SUBSTANTIAL_SCORE = -20.0
SUBSTANTIAL_MULTIPLIER = 0.7

LOW_DIVERSITY_MIN_WORDS = 10
LOW_DIVERSITY_RATIO = 0.5
SHORT_SENTENCE_WORDS = 8
ADJUSTMENT_BONUS = 10.0


@dataclass(frozen=True, slots=True)
class SparsityProfile:
    """Body-text statistics and the sparsity adjustment derived from them."""

    word_count: int
    unique_word_ratio: float  # 0.0 to 1.0
    sentence_count: int
    sparsity_score: float  # added to confidence as-is
    multiplier: float  # applied to pattern weights
    notes: tuple[str, ...] = ()  # one entry per adjustment that fired


def analyze_sparsity(body_text: str) -> SparsityProfile:
    """Derive a SparsityProfile from visible body text. Pure and deterministic."""
    body_text = body_text or ""
    words = [w for w in body_text.split() if len(w) >= MIN_TOKEN_LENGTH]
    word_count = len(words)
    unique_ratio = len({w.lower() for w in words}) / max(word_count, 1)
    sentence_count = len(_SENTENCE_END_RE.findall(body_text))

    score = 0.0
    multiplier = 1.0
    notes: list[str] = []

    for upper, bracket_score, bracket_multiplier, note in _SPARSITY_BRACKETS:
        if word_count < upper:
            score, multiplier = bracket_score, bracket_multiplier
            notes.append(note.format(n=word_count))
            break
    else:
        if word_count > SUBSTANTIAL_WORD_COUNT:
            score, multiplier = SUBSTANTIAL_SCORE, SUBSTANTIAL_MULTIPLIER
            notes.append("Page has substantial content")

    if word_count > LOW_DIVERSITY_MIN_WORDS and unique_ratio < LOW_DIVERSITY_RATIO:
        score += ADJUSTMENT_BONUS
        notes.append("Low vocabulary diversity")

    if word_count > 0 and sentence_count > 0 and word_count / sentence_count < SHORT_SENTENCE_WORDS:
        score += ADJUSTMENT_BONUS
        notes.append("Very short sentences")

    return SparsityProfile(
        word_count=word_count,
        unique_word_ratio=unique_ratio,
        sentence_count=sentence_count,
        sparsity_score=score,
        multiplier=multiplier,
        notes=tuple(notes),
    )
