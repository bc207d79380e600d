# Copyright 2026 archwith Contributors
# SPDX-License-Identifier: Apache-2.0

"""Tests for incremental generation of adapter modules."""

from __future__ import annotations

import os
import time
from pathlib import Path

import pytest

from archwith.compiler.build import BuildError, default_output_path, generate_file

# ###############
# Helpers
# ###############

VALID = """
types:
  - name: Example
    directives: from(remote_lib.Remote)
    fields:
      - name: a
        type: int
"""

BROKEN = """
types:
  - name: Example
    fields:
      - name: a
        type: int
"""


def _write(path: Path, content: str, *, mtime_offset: float = -2.0) -> None:
    """Write *content* to *path* with its mtime set *mtime_offset* seconds from now.

    The default puts the file in the past so that outputs written by the
    test are reliably newer regardless of filesystem timestamp resolution.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
    t = time.time() + mtime_offset
    os.utime(path, (t, t))


# ###############
# Output Paths
# ###############


class TestOutputPath:
    def test_default_replaces_suffix(self, tmp_path: Path) -> None:
        assert default_output_path(tmp_path / "mirrors.yaml") == tmp_path / "mirrors.py"

    def test_configured_path_is_relative_to_source(self, tmp_path: Path) -> None:
        source = tmp_path / "decl" / "mirrors.yaml"
        assert default_output_path(source, "../gen/adapters.py") == tmp_path / "decl" / "../gen/adapters.py"

    def test_configured_output_is_used(self, tmp_path: Path) -> None:
        source = tmp_path / "mirrors.yaml"
        _write(source, "output: gen/adapters.py\n" + VALID)
        generated = generate_file(source)
        assert generated.output == tmp_path / "gen" / "adapters.py"
        assert generated.output.exists()

    def test_explicit_output_wins(self, tmp_path: Path) -> None:
        source = tmp_path / "mirrors.yaml"
        _write(source, "output: ignored.py\n" + VALID)
        generated = generate_file(source, tmp_path / "explicit.py")
        assert generated.output == tmp_path / "explicit.py"
        assert not (tmp_path / "ignored.py").exists()


# ###############
# Generation
# ###############


class TestGenerate:
    def test_writes_module(self, tmp_path: Path) -> None:
        source = tmp_path / "mirrors.yaml"
        _write(source, VALID)
        generated = generate_file(source)
        assert generated.written
        assert not generated.up_to_date
        assert not generated.has_errors
        text = generated.output.read_text(encoding="utf-8")
        assert text.startswith('"""Archive adapters generated by archwith from mirrors.yaml. Do not edit."""')
        assert "class Example(MirrorAdapter):" in text

    def test_errors_prevent_writing(self, tmp_path: Path) -> None:
        source = tmp_path / "mirrors.yaml"
        _write(source, BROKEN)
        generated = generate_file(source)
        assert generated.has_errors
        assert not generated.written
        assert not generated.output.exists()

    def test_invalid_file_raises(self, tmp_path: Path) -> None:
        source = tmp_path / "mirrors.yaml"
        _write(source, "types: 3\n")
        with pytest.raises(BuildError, match="'types' must be a list"):
            generate_file(source)

    def test_missing_file_raises(self, tmp_path: Path) -> None:
        with pytest.raises(BuildError, match="not found"):
            generate_file(tmp_path / "missing.yaml")


# ###############
# Incremental Behaviour
# ###############


class TestIncremental:
    def test_second_run_is_up_to_date(self, tmp_path: Path) -> None:
        source = tmp_path / "mirrors.yaml"
        _write(source, VALID)
        generate_file(source)
        again = generate_file(source)
        assert again.up_to_date
        assert not again.written
        assert again.results == []

    def test_newer_source_regenerates(self, tmp_path: Path) -> None:
        source = tmp_path / "mirrors.yaml"
        _write(source, VALID)
        first = generate_file(source)
        _write(source, VALID.replace("name: a", "name: b"), mtime_offset=10.0)
        second = generate_file(source)
        assert second.written
        assert "b=Identity" in first.output.read_text(encoding="utf-8")

    def test_force_regenerates(self, tmp_path: Path) -> None:
        source = tmp_path / "mirrors.yaml"
        _write(source, VALID)
        generate_file(source)
        forced = generate_file(source, force=True)
        assert forced.written
        assert not forced.up_to_date
