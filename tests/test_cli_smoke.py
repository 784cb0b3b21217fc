# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""Subprocess-based CLI smoke tests.

Unlike test_cli.py, which calls ``main()`` in-process, these tests invoke
``python -m soft404.cli`` as a real subprocess.  This catches issues
invisible to in-process tests:

- Raw traceback leaks to stderr
- Exit-code mismatches when run as a real process
- stdout / stderr separation bugs
"""

from __future__ import annotations

import json
import os
import subprocess
import sys

import pytest

PYTHON = sys.executable
CLI = [PYTHON, "-m", "soft404.cli"]

LOCAL_TIMEOUT = 30


@pytest.mark.smoke
class TestCLISmoke:
    """Subprocess-based CLI smoke tests."""

    @staticmethod
    def _run(*args: str, env: dict[str, str] | None = None) -> subprocess.CompletedProcess[str]:
        return subprocess.run(
            [*CLI, *args],
            capture_output=True,
            text=True,
            encoding="utf-8",
            timeout=LOCAL_TIMEOUT,
            env={**os.environ, **(env or {})},
        )

    def test_help_includes_examples(self):
        r = self._run("classify", "--help")
        assert r.returncode == 0, f"stdout: {r.stdout}\nstderr: {r.stderr}"
        assert "--max-body-chars" in r.stdout
        assert "example" in r.stdout.lower()

    def test_unknown_subcommand_exits_nonzero(self):
        r = self._run("notacommand")
        assert r.returncode != 0, f"stdout: {r.stdout}\nstderr: {r.stderr}"

    def test_catalog_check(self):
        r = self._run("catalog", "--check")
        assert r.returncode == 0, f"stdout: {r.stdout}\nstderr: {r.stderr}"
        assert "catalog OK" in r.stdout

    def test_json_verdict_on_stdout_only(self, tmp_path):
        path = tmp_path / "p.json"
        path.write_text(json.dumps({"title": "Error 404", "bodyText": "Nothing to see."}), encoding="utf-8")
        r = self._run("classify", str(path), "--format", "json")
        assert r.returncode == 0, f"stdout: {r.stdout}\nstderr: {r.stderr}"
        [result] = json.loads(r.stdout)
        assert result["is404"] is True
        assert "Traceback" not in r.stderr

    def test_missing_file_no_traceback(self, tmp_path):
        r = self._run("classify", str(tmp_path / "absent.json"))
        assert r.returncode == 1, f"stdout: {r.stdout}\nstderr: {r.stderr}"
        assert "Traceback" not in r.stderr
        assert "absent.json" in r.stderr

    def test_json_logs_from_env(self, tmp_path):
        r = self._run("classify", str(tmp_path / "absent.json"), env={"SOFT404_LOG_JSON": "1"})
        assert r.returncode == 1
        line = next(ln for ln in r.stderr.splitlines() if ln.startswith("{"))
        record = json.loads(line)
        assert record["level"] == "error"
        assert record["logger"] == "soft404.cli"
