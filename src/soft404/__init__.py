# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""soft404: detect "soft" 404 pages from rendered page content.

A soft 404 answers HTTP 200 but tells the reader the resource is gone.
``classify_page()`` scores title, headings, meta tags, URL and body text
against a weighted indicator catalog and returns a ClassificationOutcome:
- is_404: the verdict
- confidence: accumulated weighted score (not a probability)
- indicators: human-readable trail of every piece of evidence
"""

from __future__ import annotations

from .decision import ClassificationOutcome
from .detector import classify_page
from .signals import PageSignals, PageSnapshot, extract_signals, signals_from_html

__version__ = "0.3.0"

__all__ = [
    "ClassificationOutcome",
    "PageSignals",
    "PageSnapshot",
    "classify_page",
    "extract_signals",
    "signals_from_html",
]
