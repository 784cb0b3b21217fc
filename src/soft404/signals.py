# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""Page signal extraction, the engine's only contact with the host page.

Two ways in:
  * ``extract_signals()`` takes the host's page record (the input contract:
    title, headings, metaTags, bodyText, url, domain) as a mapping or a
    ``PageSnapshot`` and normalises it into an immutable ``PageSignals``.
  * ``signals_from_html()`` reads a rendered DOM dump (e.g. a headless
    browser's ``page.content()``) with lxml and fills the same record,
    including the optional page-structure counts.

Missing, ``None`` or wrongly typed fields become empty values.  Nothing here
raises on page content.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any
from urllib.parse import urlparse

import lxml.html
from lxml import etree
from pydantic import BaseModel, ConfigDict, Field, field_validator

logger = logging.getLogger(__name__)

HEADING_TAGS = ("h1", "h2", "h3")
_INVISIBLE_TAGS = ("script", "style", "noscript", "template")

# ---------------------------------------------------------------------------
# Engine-side records
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class PageStructure:
    """Element counts of the rendered page (optional evidence)."""

    image_count: int = 0
    link_count: int = 0
    form_count: int = 0
    image_hints: tuple[str, ...] = ()  # src and alt of every image


@dataclass(frozen=True, slots=True)
class PageSignals:
    """Immutable snapshot of everything the scorer looks at."""

    title: str = ""
    headings: tuple[str, ...] = ()
    meta_tags: Mapping[str, str] = field(default_factory=lambda: MappingProxyType({}))
    body_text: str = ""
    url: str = ""
    domain: str = ""
    structure: PageStructure | None = None


# ---------------------------------------------------------------------------
# Input contract
# ---------------------------------------------------------------------------


def _as_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="replace")
    return str(value)


def _as_count(value: Any) -> int:
    try:
        return max(int(value), 0)
    except (TypeError, ValueError, OverflowError):
        return 0


def _as_list(value: Any) -> list:
    if isinstance(value, (str, bytes)):
        return [value]
    if value is None or isinstance(value, Mapping) or not isinstance(value, Iterable):
        return []
    return list(value)


class MetaTag(BaseModel):
    """One ``<meta>`` element: ``name`` or ``httpEquiv`` plus ``content``."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore", frozen=True)

    name: str = ""
    http_equiv: str = Field("", alias="httpEquiv")
    content: str = ""

    @field_validator("name", "http_equiv", "content", mode="before")
    @classmethod
    def _text(cls, v: Any) -> str:
        return _as_text(v)

    @property
    def key(self) -> str:
        """Lookup key used by the catalog: ``name`` or ``http-equiv:<value>``."""
        if self.name.strip():
            return self.name.strip().lower()
        if self.http_equiv.strip():
            return f"http-equiv:{self.http_equiv.strip().lower()}"
        return ""


class StructureSnapshot(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore", frozen=True)

    image_count: int = Field(0, alias="imageCount")
    link_count: int = Field(0, alias="linkCount")
    form_count: int = Field(0, alias="formCount")
    image_hints: list[str] = Field(default_factory=list, alias="imageHints")

    @field_validator("image_count", "link_count", "form_count", mode="before")
    @classmethod
    def _count(cls, v: Any) -> int:
        return _as_count(v)

    @field_validator("image_hints", mode="before")
    @classmethod
    def _hints(cls, v: Any) -> list[str]:
        return [_as_text(x) for x in _as_list(v)]


class PageSnapshot(BaseModel):
    """The host application's page record, leniently validated."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore", frozen=True)

    title: str = ""
    headings: list[str] = Field(default_factory=list)
    meta_tags: list[MetaTag] = Field(default_factory=list, alias="metaTags")
    body_text: str = Field("", alias="bodyText")
    url: str = ""
    domain: str = ""
    structure: StructureSnapshot | None = None

    @field_validator("title", "body_text", "url", "domain", mode="before")
    @classmethod
    def _text(cls, v: Any) -> str:
        return _as_text(v)

    @field_validator("headings", mode="before")
    @classmethod
    def _headings(cls, v: Any) -> list[str]:
        return [_as_text(h) for h in _as_list(v) if h is not None]

    @field_validator("meta_tags", mode="before")
    @classmethod
    def _meta(cls, v: Any) -> list[Any]:
        # {"prerender-status-code": "404"} shorthand
        if isinstance(v, Mapping):
            return [{"name": k, "content": c} for k, c in v.items()]
        tags: list[Any] = []
        for m in _as_list(v):
            if isinstance(m, Mapping) and "http-equiv" in m:
                m = {**m, "httpEquiv": m["http-equiv"]}
            if isinstance(m, (Mapping, MetaTag)):
                tags.append(m)
        return tags

    @field_validator("structure", mode="before")
    @classmethod
    def _structure(cls, v: Any) -> Any:
        return v if isinstance(v, (Mapping, StructureSnapshot)) else None


# ---------------------------------------------------------------------------
# Extraction
# ---------------------------------------------------------------------------


def _domain_of(url: str) -> str:
    try:
        return (urlparse(url).hostname or "").lower()
    except ValueError:
        return ""


def _freeze_meta(tags: Iterable[MetaTag]) -> Mapping[str, str]:
    meta: dict[str, str] = {}
    for tag in tags:
        key = tag.key
        # First occurrence wins, like querySelector.
        if key and key not in meta:
            meta[key] = tag.content
    return MappingProxyType(meta)


def extract_signals(snapshot: PageSnapshot | Mapping[str, Any] | None) -> PageSignals:
    """Normalise a host page record into PageSignals."""
    if snapshot is None:
        snapshot = PageSnapshot()
    elif not isinstance(snapshot, PageSnapshot):
        snapshot = PageSnapshot.model_validate(dict(snapshot))

    domain = snapshot.domain.strip().lower() or _domain_of(snapshot.url)
    structure = None
    if snapshot.structure is not None:
        s = snapshot.structure
        structure = PageStructure(s.image_count, s.link_count, s.form_count, tuple(s.image_hints))

    return PageSignals(
        title=snapshot.title,
        headings=tuple(snapshot.headings),
        meta_tags=_freeze_meta(snapshot.meta_tags),
        body_text=snapshot.body_text,
        url=snapshot.url,
        domain=domain,
        structure=structure,
    )


def _element_text(el: lxml.html.HtmlElement) -> str:
    return " ".join(el.text_content().split())


def signals_from_html(html: str, url: str = "") -> PageSignals:
    """Build PageSignals from a rendered DOM dump.

    Unparseable or empty markup yields signals carrying only the URL.
    """
    if not html or not html.strip():
        return extract_signals({"url": url})

    try:
        parser = lxml.html.HTMLParser(recover=True, encoding="utf-8")
        doc = lxml.html.document_fromstring(html.encode("utf-8"), parser=parser)
    except (etree.LxmlError, ValueError) as e:
        logger.warning("Could not parse DOM snapshot for %s: %s", url or "<unknown>", e)
        return extract_signals({"url": url})

    for el in list(doc.iter(etree.Comment, *_INVISIBLE_TAGS)):
        el.drop_tree()

    title_el = doc.find(".//title")
    title = _element_text(title_el) if title_el is not None else ""

    headings = [text for el in doc.iter(*HEADING_TAGS) if (text := _element_text(el))]

    meta_tags = [
        {"name": m.get("name"), "httpEquiv": m.get("http-equiv"), "content": m.get("content")}
        for m in doc.iter("meta")
    ]

    body = doc.find(".//body")
    # Block elements carry no whitespace between them; join text nodes with spaces.
    body_text = " ".join(body.itertext()) if body is not None else ""

    images = list(doc.iter("img"))
    hints = [v for img in images for v in (img.get("src"), img.get("alt")) if v]

    return extract_signals(
        {
            "title": title,
            "headings": headings,
            "metaTags": meta_tags,
            "bodyText": body_text,
            "url": url,
            "structure": {
                "imageCount": len(images),
                "linkCount": sum(1 for _ in doc.iter("a")),
                "formCount": sum(1 for _ in doc.iter("form")),
                "imageHints": hints,
            },
        }
    )
