# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""soft404 CLI: classify page snapshots, inspect the indicator catalog.

Usage:
    python -m soft404.cli classify PATH [PATH ...] [--url URL] [--format table|json] [--max-body-chars N]
    python -m soft404.cli catalog [--check]

PATH is a JSON page record (one object or a list of objects with title,
headings, metaTags, bodyText, url, domain) or an .html/.htm DOM dump.

Environment:
    SOFT404_LOG_LEVEL       root log level (default INFO)
    SOFT404_LOG_JSON        1/true/yes for JSON log lines
    SOFT404_MAX_BODY_CHARS  cap on body text length before scoring (0 = no cap)
"""

from __future__ import annotations

import argparse
import dataclasses
import json
import logging
import os
import sys
from contextlib import suppress
from pathlib import Path

from .errors import CatalogError, SnapshotError
from .signals import PageSignals, extract_signals, signals_from_html

logger = logging.getLogger("soft404.cli")

HTML_SUFFIXES = (".html", ".htm")
_TRAIL_PREVIEW = 2


def _load_snapshots(path_str: str, url: str = "") -> list[tuple[str, PageSignals]]:
    """Read one snapshot file into (label, signals) pairs.

    Raises:
        SnapshotError: unreadable file, invalid JSON, or JSON that is not an
            object / list of objects.
    """
    path = Path(path_str)
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise SnapshotError(f"cannot read {path}: {e}", path=str(path)) from e

    if path.suffix.lower() in HTML_SUFFIXES:
        return [(path.name, signals_from_html(text, url=url))]

    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise SnapshotError(f"{path} is not valid JSON: {e}", path=str(path)) from e

    records = data if isinstance(data, list) else [data]
    if not all(isinstance(r, dict) for r in records):
        raise SnapshotError(f"{path} must hold a page object or a list of page objects", path=str(path))

    if len(records) == 1:
        return [(path.name, extract_signals(records[0]))]
    return [(f"{path.name}[{i}]", extract_signals(r)) for i, r in enumerate(records)]


def _cap_body(signals: PageSignals, max_chars: int) -> PageSignals:
    if max_chars <= 0 or len(signals.body_text) <= max_chars:
        return signals
    return dataclasses.replace(signals, body_text=signals.body_text[:max_chars])


def _max_body_chars(args: argparse.Namespace) -> int:
    if args.max_body_chars is not None:
        return args.max_body_chars
    env_cap = os.environ.get("SOFT404_MAX_BODY_CHARS", "").strip()
    if env_cap:
        with suppress(ValueError):
            return int(env_cap)
    return 0


def cmd_classify(args: argparse.Namespace) -> int:
    """Classify every snapshot; return the process exit code."""
    from tabulate import tabulate

    from .detector import classify_page

    max_chars = _max_body_chars(args)
    failed = False
    rows: list[list] = []
    payload: list[dict] = []

    for path_str in args.paths:
        try:
            snapshots = _load_snapshots(path_str, url=args.url or "")
        except SnapshotError as e:
            logger.error("Skipping snapshot: %s", e)
            failed = True
            continue

        for label, signals in snapshots:
            outcome = classify_page(_cap_body(signals, max_chars))
            payload.append({"source": label, **outcome.to_dict()})
            trail = outcome.indicators if args.verbose else outcome.indicators[:_TRAIL_PREVIEW]
            rows.append(
                [
                    label,
                    "yes" if outcome.is_404 else "no",
                    outcome.confidence,
                    "\n".join(trail),
                ]
            )

    if args.format == "json":
        print(json.dumps(payload, ensure_ascii=False, indent=2))
    elif rows:
        headers = ["source", "soft 404", "confidence", "indicators"]
        print(tabulate(rows, headers=headers, tablefmt="simple", floatfmt=".1f"))

    return 1 if failed else 0


def cmd_catalog(args: argparse.Namespace) -> int:
    """Print the indicator catalog, optionally validating it first."""
    from tabulate import tabulate

    from . import catalog

    if args.check:
        try:
            catalog.validate_catalog()
        except CatalogError as e:
            print(f"catalog invalid: {e}", file=sys.stderr)
            return 1

    rows = [
        [tier, rule.context.value, f"{rule.weight:g}", rule.source]
        for tier, rules in catalog.iter_tiers()
        for rule in rules
    ]
    print(f"indicator catalog {catalog.CATALOG_VERSION} ({len(rows)} rules)")
    print(tabulate(rows, headers=["tier", "context", "weight", "pattern"], tablefmt="simple"))

    overrides = [
        [p.domain, f"{p.threshold_override:g}"] for p in catalog.PLATFORM_PROFILES if p.threshold_override is not None
    ]
    if overrides:
        print()
        print(tabulate(overrides, headers=["platform", "threshold override"], tablefmt="simple"))
    if args.check:
        print("catalog OK")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Detect soft 404 pages from rendered page snapshots",
        prog="python -m soft404.cli",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Full indicator trail and DEBUG logs")
    subparsers = parser.add_subparsers(dest="command", required=True)

    p_classify = subparsers.add_parser(
        "classify",
        help="Classify JSON page records or HTML DOM dumps",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""\
examples:
  %(prog)s page.json                          Classify one page record
  %(prog)s dump.html --url https://x.test/a   Classify a DOM dump
  %(prog)s pages.json --format json           JSON verdicts to stdout""",
    )
    p_classify.add_argument("paths", nargs="+", metavar="PATH", help="Snapshot file(s)")
    p_classify.add_argument("--url", type=str, metavar="URL", help="Page URL for HTML dumps")
    p_classify.add_argument("--format", choices=["table", "json"], default="table", help="Output format")
    p_classify.add_argument(
        "--max-body-chars",
        type=int,
        default=None,
        metavar="N",
        help="Truncate body text to N characters before scoring (env: SOFT404_MAX_BODY_CHARS)",
    )

    p_catalog = subparsers.add_parser("catalog", help="List indicator rules")
    p_catalog.add_argument("--check", action="store_true", help="Validate the catalog tables")

    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    from .logging_config import configure_from_env

    configure_from_env(verbose=args.verbose)

    commands = {"classify": cmd_classify, "catalog": cmd_catalog}
    try:
        code = commands[args.command](args)
    except KeyboardInterrupt:
        print("\nInterrupted.", file=sys.stderr)
        sys.exit(130)
    except Exception as e:
        print(f"error: {e}", file=sys.stderr)
        if args.verbose:
            import traceback

            traceback.print_exc(file=sys.stderr)
        sys.exit(1)
    sys.exit(code)


if __name__ == "__main__":
    main()
