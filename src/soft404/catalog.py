# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""Indicator catalog: static, read-only tables of soft-404 evidence.

Every pattern the scorer knows about lives here as data.  Rules are grouped
by evidentiary strength (strong / medium / weak), tagged with the page
context they may match in, and compiled once at import.  Platform coverage
is a row in ``PLATFORM_PROFILES``, never a new branch in the scorer.

Tables are tuples and mapping proxies so they can be shared across
concurrent evaluations without locking.
"""

from __future__ import annotations

import enum
import re
from collections import Counter
from dataclasses import dataclass
from types import MappingProxyType

from .errors import CatalogError

CATALOG_VERSION = "2025.1"


class MatchContext(enum.Enum):
    """Where on the page a rule is allowed to match."""

    TITLE = "title"
    HEADING = "heading"
    BODY = "body"
    URL = "url"
    ANY = "any"

    def applies_to(self, location: MatchContext) -> bool:
        """True if a rule with this context may be tested against *location*."""
        return self is location or (self is MatchContext.ANY and location is not MatchContext.URL)


@dataclass(frozen=True, slots=True)
class IndicatorRule:
    """A compiled text pattern with its weight and match context."""

    pattern: re.Pattern[str]
    weight: float
    context: MatchContext

    @property
    def source(self) -> str:
        return self.pattern.pattern

    def search(self, text: str) -> bool:
        return bool(text) and self.pattern.search(text) is not None


@dataclass(frozen=True, slots=True)
class PlatformProfile:
    """Per-domain calibration for sites whose error pages carry heavy chrome."""

    domain: str
    rules: tuple[IndicatorRule, ...]
    threshold_override: float | None = None

    def matches(self, domain: str) -> bool:
        return domain_matches(domain, self.domain)


def _rule(pattern: str, weight: float, context: MatchContext = MatchContext.ANY) -> IndicatorRule:
    return IndicatorRule(re.compile(pattern, re.IGNORECASE), float(weight), context)


def domain_matches(domain: str, target: str) -> bool:
    """Exact host or any subdomain of *target* (``m.facebook.com`` matches ``facebook.com``)."""
    domain = domain.lower().rstrip(".")
    return domain == target or domain.endswith("." + target)


# Apostrophes: straight, typographic, and the modifier letter some CMSes emit.
_APOS = "['’ʼ]"

# Ordered words after a quoted "404". Each step is atomic so a page without
# the full sequence fails in linear time.
_QUOTED_404_LOOKING_FOR = (
    r'"404"(?>.*?not)(?>.*?the)(?>.*?page)(?>.*?you)(?>.*?are)(?>.*?looking).*?for'
)

# ---------------------------------------------------------------------------
# Tiered indicators
# ---------------------------------------------------------------------------

STRONG_INDICATORS: tuple[IndicatorRule, ...] = (
    _rule(r"^404\s*[-–—]?\s*(error|not\s+found|page\s+not\s+found)", 40, MatchContext.TITLE),
    _rule(r"^error\s+404", 40, MatchContext.TITLE),
    _rule(r"Page\s+not\s+found", 35, MatchContext.TITLE),
    _rule(r"HTTP\s+(ERROR\s+)?404", 35),
    _rule(r"404\s+File\s+or\s+directory\s+not\s+found", 35),
    _rule(r"The\s+requested\s+(URL|resource)\s+.*\s+was\s+not\s+found", 30),
    _rule(_QUOTED_404_LOOKING_FOR, 40),
    _rule(r"This\s+is\s+not\s+the\s+(web\s+)?page\s+you.*looking\s+for", 35),
)

MEDIUM_INDICATORS: tuple[IndicatorRule, ...] = (
    _rule(
        rf"page\s+(you({_APOS}re|\s+are)\s+looking\s+for\s+)?(cannot\s+be\s+found|doesn{_APOS}?t\s+exist)",
        20,
    ),
    _rule(rf"sorry[,.]?\s+(this|that)\s+page\s+(doesn{_APOS}?t|does\s+not)\s+exist", 20),
    _rule(rf"we\s+can{_APOS}?t\s+find\s+(the\s+page|what)\s+you({_APOS}?re)?\s+looking\s+for", 20),
    _rule(rf"this\s+content\s+isn{_APOS}?t\s+available", 30),
    _rule(r"page\s+has\s+been\s+(removed|deleted|moved)", 15),
    _rule(rf"This\s+page\s+isn{_APOS}?t\s+available", 20),
    _rule(rf"it{_APOS}?s\s+been\s+deleted", 25),
    _rule(r"owner\s+only\s+shared\s+it\s+with\s+a\s+small\s+group", 20),
)

# Weak indicators only count when several distinct ones co-occur.
WEAK_INDICATORS: tuple[IndicatorRule, ...] = (
    _rule(r"not\s+found", 5, MatchContext.BODY),
    _rule(rf"doesn{_APOS}?t\s+exist", 5, MatchContext.BODY),
    _rule(r"no\s+longer\s+available", 5, MatchContext.BODY),
    _rule(r"broken\s+link", 5, MatchContext.BODY),
    _rule(r"dead\s+link", 5, MatchContext.BODY),
)

WEAK_MIN_DISTINCT = 3
WEAK_BONUS_PER_MATCH = 3.0

# Fixed weights, unaffected by the sparsity multiplier.
URL_INDICATORS: tuple[IndicatorRule, ...] = (
    _rule(r"/404(\.html?)?$", 30, MatchContext.URL),
    _rule(r"/error/404", 30, MatchContext.URL),
    _rule(r"/not[-_]?found", 20, MatchContext.URL),
    _rule(r"/page[-_]?not[-_]?found", 25, MatchContext.URL),
)

# Meta keys as normalised by ``soft404.signals`` -> trail label.
STATUS_META_KEYS: MappingProxyType[str, str] = MappingProxyType(
    {
        "prerender-status-code": "Meta prerender-status-code is 404",
        "http-equiv:status": "Meta http-equiv status is 404",
    }
)
STATUS_META_WEIGHT = 50.0

# ---------------------------------------------------------------------------
# Platform profiles
# ---------------------------------------------------------------------------

_TWITTER_RULES = (
    _rule(rf"This\s+account\s+doesn{_APOS}?t\s+exist", 50),
    _rule(r"Try\s+searching\s+for\s+another", 20),
)

PLATFORM_PROFILES: tuple[PlatformProfile, ...] = (
    PlatformProfile(
        "github.com",
        (
            _rule(r"Page\s+not\s+found", 40, MatchContext.TITLE),
            _rule(_QUOTED_404_LOOKING_FOR, 50),
            _rule(r"This\s+is\s+not\s+the\s+(web\s+)?page\s+you.*looking\s+for", 40),
        ),
    ),
    # Facebook renders full navigation and footer even on removed content.
    PlatformProfile(
        "facebook.com",
        (
            _rule(rf"This\s+content\s+isn{_APOS}?t\s+available", 40),
            _rule(rf"it{_APOS}?s\s+been\s+deleted", 30),
            _rule(r"owner\s+only\s+shared\s+it\s+with\s+a\s+small\s+group", 25),
        ),
        threshold_override=35.0,
    ),
    PlatformProfile("twitter.com", _TWITTER_RULES),
    PlatformProfile("x.com", _TWITTER_RULES),
)

PLATFORM_DEFAULT_THRESHOLD = 45.0

# Pages on these hosts are never evaluated: a redirect to search from a
# search results page would loop.
SEARCH_ENGINE_DOMAINS: tuple[str, ...] = (
    "google.com",
    "bing.com",
    "yahoo.com",
    "duckduckgo.com",
    "baidu.com",
    "yandex.com",
    "yandex.ru",
    "ask.com",
    "aol.com",
    "ecosia.org",
    "startpage.com",
    "searx.me",
    "qwant.com",
    "search.brave.com",
    "neeva.com",
)


def find_platform(domain: str) -> PlatformProfile | None:
    """Return the first platform profile whose domain matches, else None."""
    if not domain:
        return None
    return next((p for p in PLATFORM_PROFILES if p.matches(domain)), None)


def is_search_engine_domain(domain: str) -> bool:
    return bool(domain) and any(domain_matches(domain, d) for d in SEARCH_ENGINE_DOMAINS)


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------

_TIER_CONTEXTS: dict[str, frozenset[MatchContext]] = {
    "strong": frozenset({MatchContext.TITLE, MatchContext.HEADING, MatchContext.BODY, MatchContext.ANY}),
    "medium": frozenset({MatchContext.TITLE, MatchContext.HEADING, MatchContext.BODY, MatchContext.ANY}),
    "weak": frozenset({MatchContext.BODY}),
    "url": frozenset({MatchContext.URL}),
    "platform": frozenset({MatchContext.TITLE, MatchContext.BODY, MatchContext.ANY}),
}


def iter_tiers() -> list[tuple[str, tuple[IndicatorRule, ...]]]:
    """(tier name, rules) for every table, platform rows labelled by domain."""
    tiers: list[tuple[str, tuple[IndicatorRule, ...]]] = [
        ("strong", STRONG_INDICATORS),
        ("medium", MEDIUM_INDICATORS),
        ("weak", WEAK_INDICATORS),
        ("url", URL_INDICATORS),
    ]
    tiers.extend((f"platform:{p.domain}", p.rules) for p in PLATFORM_PROFILES)
    return tiers


def validate_catalog() -> None:
    """Raise CatalogError if any table violates the catalog's shape rules."""
    for tier, rules in iter_tiers():
        allowed = _TIER_CONTEXTS[tier.split(":", 1)[0]]
        for rule in rules:
            if rule.weight <= 0:
                raise CatalogError(f"{tier} rule {rule.source!r} has non-positive weight {rule.weight}")
            if rule.context not in allowed:
                raise CatalogError(f"{tier} rule {rule.source!r} uses context {rule.context.value!r}")

    dupes = [d for d, n in Counter(p.domain for p in PLATFORM_PROFILES).items() if n > 1]
    if dupes:
        raise CatalogError(f"duplicate platform profiles: {', '.join(sorted(dupes))}")
    for profile in PLATFORM_PROFILES:
        if profile.threshold_override is not None and profile.threshold_override <= 0:
            raise CatalogError(f"platform {profile.domain} has non-positive threshold override")
