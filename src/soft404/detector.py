# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""Soft-404 detection pipeline.

    signals -> sparsity -> score -> decide -> ClassificationOutcome

One synchronous call per page; nothing is cached between calls.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from .catalog import is_search_engine_domain
from .decision import ClassificationOutcome, decide
from .scoring import score
from .signals import PageSignals, PageSnapshot, extract_signals
from .sparsity import analyze_sparsity

logger = logging.getLogger(__name__)

SEARCH_ENGINE_SKIPPED = "Search engine domain skipped"


def has_explicit_404(signals: PageSignals) -> bool:
    """True if the literal token ``404`` appears in the title or body text."""
    return "404" in signals.title or "404" in signals.body_text


def classify_page(page: PageSignals | PageSnapshot | Mapping[str, Any] | None) -> ClassificationOutcome:
    """Decide whether a rendered page is a soft 404.

    Args:
        page: ready PageSignals, a PageSnapshot, or the host's page record
            (``title``, ``headings``, ``metaTags``, ``bodyText``, ``url``, ``domain``).

    Returns:
        ClassificationOutcome; ``is_404`` is False whenever evidence is missing.
    """
    signals = page if isinstance(page, PageSignals) else extract_signals(page)

    if is_search_engine_domain(signals.domain):
        logger.debug("Skipping soft-404 check on search engine %s", signals.domain)
        return ClassificationOutcome(is_404=False, confidence=0.0, indicators=(SEARCH_ENGINE_SKIPPED,))

    sparsity = analyze_sparsity(signals.body_text)
    result = score(signals, sparsity)
    outcome = decide(result, sparsity, has_explicit_404(signals))

    logger.debug(
        "soft-404 verdict for %s: is_404=%s confidence=%.1f strong=%d weak=%d words=%d platform=%s",
        signals.url or signals.domain or "<unknown>",
        outcome.is_404,
        outcome.confidence,
        result.strong_indicator_count,
        result.weak_indicator_count,
        sparsity.word_count,
        result.platform_matched,
    )
    return outcome
