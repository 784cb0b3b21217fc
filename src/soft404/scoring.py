# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""Weighted confidence scoring against the indicator catalog.

Passes, each adding to one running confidence sum:

  1. Platform: per-domain rules (title full weight, body half weight)
  2. Title / headings: strong + medium tiers (headings at 0.8)
  3. Meta: status-code meta tags, fixed +50
  4. URL: path patterns, fixed weights
  5. Weak: body phrases, only counted when 3+ distinct ones co-occur
  6. Body: strong + medium tiers at a length-dependent fraction
  7. Structure: element counts, when the host supplied them

Pattern weights (except meta and URL) are scaled by the sparsity multiplier.
Pass order only shapes the indicator trail; the score is a plain sum.  A
pattern may legitimately score in several passes (title, heading, body and
again via its platform twin). Layered evidence is kept, not deduplicated.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field

from . import catalog
from .catalog import IndicatorRule, MatchContext, PlatformProfile
from .signals import PageSignals
from .sparsity import SparsityProfile

HEADING_WEIGHT = 0.8
PLATFORM_BODY_WEIGHT = 0.5

# (word count upper bound exclusive, fraction); falls through to the default.
_BODY_WEIGHT_BRACKETS: tuple[tuple[int, float], ...] = ((100, 0.6), (200, 0.4))
_BODY_WEIGHT_DEFAULT = 0.3

MINIMAL_STRUCTURE_BONUS = 10.0
KNOWN_SITE_SPARSE_BONUS = 5.0
ERROR_IMAGE_BONUS = 20.0


@dataclass(frozen=True, slots=True)
class ScoringResult:
    """Accumulated evidence for one page."""

    confidence: float
    strong_indicator_count: int
    weak_indicator_count: int
    indicator_trail: tuple[str, ...]
    platform_matched: bool
    platform_threshold: float | None = None  # matched profile's override, if any


@dataclass(slots=True)
class _Tally:
    """Mutable accumulator, private to one ``score()`` call."""

    multiplier: float
    confidence: float = 0.0
    strong: int = 0
    weak: int = 0
    trail: list[str] = field(default_factory=list)

    def add(self, weight: float, label: str, *, strong: bool = False) -> None:
        self.confidence += weight
        self.trail.append(label)
        if strong:
            self.strong += 1


def body_weight_fraction(word_count: int) -> float:
    """Fraction of a strong/medium weight granted to a body-text match."""
    return next((f for upper, f in _BODY_WEIGHT_BRACKETS if word_count < upper), _BODY_WEIGHT_DEFAULT)


def _tiers() -> Iterable[tuple[tuple[IndicatorRule, ...], bool, str]]:
    yield catalog.STRONG_INDICATORS, True, ""
    yield catalog.MEDIUM_INDICATORS, False, " (medium)"


def _score_platform(tally: _Tally, profile: PlatformProfile, signals: PageSignals) -> bool:
    fired = False
    for rule in profile.rules:
        if rule.context.applies_to(MatchContext.TITLE) and rule.search(signals.title):
            tally.add(
                rule.weight * tally.multiplier,
                f"Platform-specific ({profile.domain}): {rule.source}",
                strong=True,
            )
            fired = True
        if rule.context.applies_to(MatchContext.BODY) and rule.search(signals.body_text):
            tally.add(
                rule.weight * PLATFORM_BODY_WEIGHT * tally.multiplier,
                f"Platform-specific body ({profile.domain}): {rule.source}",
            )
            fired = True
    return fired


def _score_title_and_headings(tally: _Tally, signals: PageSignals) -> None:
    for rules, strong, suffix in _tiers():
        for rule in rules:
            if rule.context.applies_to(MatchContext.TITLE) and rule.search(signals.title):
                tally.add(rule.weight * tally.multiplier, f"Title matches{suffix}: {rule.source}", strong=strong)

    for heading in signals.headings:
        for rules, strong, _suffix in _tiers():
            for rule in rules:
                if rule.context.applies_to(MatchContext.HEADING) and rule.search(heading):
                    tally.add(
                        rule.weight * HEADING_WEIGHT * tally.multiplier,
                        f"Heading matches: {rule.source}",
                        strong=strong,
                    )


def _score_meta(tally: _Tally, signals: PageSignals) -> None:
    for key, label in catalog.STATUS_META_KEYS.items():
        if signals.meta_tags.get(key, "").strip() == "404":
            tally.add(catalog.STATUS_META_WEIGHT, label, strong=True)


def _score_url(tally: _Tally, signals: PageSignals) -> None:
    url = signals.url.lower()
    for rule in catalog.URL_INDICATORS:
        if rule.search(url):
            tally.add(rule.weight, f"URL matches: {rule.source}")


def _score_weak(tally: _Tally, signals: PageSignals) -> None:
    count = sum(1 for rule in catalog.WEAK_INDICATORS if rule.search(signals.body_text))
    tally.weak = count
    if count >= catalog.WEAK_MIN_DISTINCT:
        tally.add(count * catalog.WEAK_BONUS_PER_MATCH, f"Multiple weak indicators found: {count}")


def _score_body(tally: _Tally, signals: PageSignals, word_count: int) -> None:
    fraction = body_weight_fraction(word_count)
    for rules, _strong, _suffix in _tiers():
        for rule in rules:
            if rule.context.applies_to(MatchContext.BODY) and rule.search(signals.body_text):
                tally.add(rule.weight * fraction * tally.multiplier, f"Body matches: {rule.source}")


def _score_structure(tally: _Tally, signals: PageSignals, word_count: int, known_site: bool) -> None:
    structure = signals.structure
    if structure is None:
        return
    if not known_site and structure.image_count <= 2 and structure.link_count <= 10 and structure.form_count == 0:
        tally.add(MINIMAL_STRUCTURE_BONUS, "Minimal page structure")
    elif known_site and word_count < 100:
        tally.add(KNOWN_SITE_SPARSE_BONUS, "Known site with sparse content")
    if any("404" in hint.lower() for hint in structure.image_hints):
        tally.add(ERROR_IMAGE_BONUS, "404 image found")


def score(signals: PageSignals, sparsity: SparsityProfile) -> ScoringResult:
    """Accumulate weighted soft-404 evidence for one page."""
    tally = _Tally(multiplier=sparsity.multiplier, confidence=sparsity.sparsity_score)
    tally.trail.extend(sparsity.notes)

    profile = catalog.find_platform(signals.domain)
    platform_matched = _score_platform(tally, profile, signals) if profile is not None else False

    _score_title_and_headings(tally, signals)
    _score_meta(tally, signals)
    _score_url(tally, signals)
    _score_weak(tally, signals)
    _score_body(tally, signals, sparsity.word_count)
    _score_structure(tally, signals, sparsity.word_count, known_site=profile is not None)

    return ScoringResult(
        confidence=tally.confidence,
        strong_indicator_count=tally.strong,
        weak_indicator_count=tally.weak,
        indicator_trail=tuple(tally.trail),
        platform_matched=platform_matched,
        platform_threshold=profile.threshold_override if platform_matched and profile is not None else None,
    )
