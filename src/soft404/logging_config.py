# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""structlog + stdlib bridge for the soft404 CLI and host applications.

Engine modules log through plain ``logging.getLogger(__name__)``; calling
:func:`configure` routes those records through structlog so they render as
console lines (terminal) or JSON lines (log shippers).

Leaf module: no soft404 imports.
"""

from __future__ import annotations

import logging
import os
import sys
from collections.abc import Mapping
from typing import TextIO

import structlog

_TRUTHY = ("1", "true", "yes")


def _shared_processors() -> list:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]


def _env_level(env: Mapping[str, str]) -> str:
    return env.get("SOFT404_LOG_LEVEL", "").strip() or "INFO"


def _env_json(env: Mapping[str, str]) -> bool:
    return env.get("SOFT404_LOG_JSON", "").strip().lower() in _TRUTHY


def configure(
    *,
    json_output: bool | None = None,
    level: str | None = None,
    stream: TextIO | None = None,
    environ: Mapping[str, str] | None = None,
) -> None:
    """Route all soft404 (and host) log records through one structlog handler.

    Arguments left as ``None`` come from the environment:

        SOFT404_LOG_LEVEL   root level name (default INFO; unknown names mean INFO)
        SOFT404_LOG_JSON    1/true/yes for JSON lines instead of console lines

    Args:
        json_output: JSON lines (log shippers) or plain console lines (terminal).
        level: Root logger level name.
        stream: Destination stream, ``sys.stderr`` at call time by default.
        environ: Mapping read instead of ``os.environ``.
    """
    env = os.environ if environ is None else environ
    if json_output is None:
        json_output = _env_json(env)
    if level is None:
        level = _env_level(env)

    shared = _shared_processors()
    structlog.configure(
        processors=[*shared, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    renderer = structlog.processors.JSONRenderer() if json_output else structlog.dev.ConsoleRenderer(colors=False)
    handler = logging.StreamHandler(stream if stream is not None else sys.stderr)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processors=[structlog.stdlib.ProcessorFormatter.remove_processors_meta, renderer],
            foreign_pre_chain=shared,
        )
    )

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(getattr(logging, level.upper(), logging.INFO))


def configure_from_env(environ: Mapping[str, str] | None = None, *, verbose: bool = False) -> None:
    """CLI entry: environment settings, with ``verbose`` forcing DEBUG."""
    configure(level="DEBUG" if verbose else None, environ=environ)
