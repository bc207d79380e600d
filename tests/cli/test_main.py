# Copyright 2026 archwith Contributors
# SPDX-License-Identifier: Apache-2.0

"""Tests for the archwith CLI entry point."""

import json
import os
import sys
import time
from pathlib import Path

import pytest

from archwith.cli.main import main

# ###############
# Helpers
# ###############

VALID = """
types:
  - name: MirrorPath
    directives: from(pathlib.PurePath)
    fields:
      - name: text
        type: str
        directives: getter = "conv.path_text"
  - name: Example
    directives: from(remote_lib.Remote)
    fields:
      - name: a
        type: int
      - name: b
        type: MirrorPath
        directives: from(pathlib.PurePath)
"""

BROKEN = """
types:
  - name: Example
    fields:
      - name: a
        type: int
        directives: getter_owned
"""


def _write(path: Path, content: str) -> Path:
    path.write_text(content, encoding="utf-8")
    t = time.time() - 2.0
    os.utime(path, (t, t))
    return path


def _run(monkeypatch: pytest.MonkeyPatch, *args: str) -> int:
    monkeypatch.setattr(sys, "argv", ["archwith", *args])
    with pytest.raises(SystemExit) as exc_info:
        main()
    code = exc_info.value.code
    assert isinstance(code, int)
    return code


def test_main_no_args_prints_help_and_exits(monkeypatch: pytest.MonkeyPatch) -> None:
    """main() with no subcommand prints help and exits with code 0."""
    assert _run(monkeypatch) == 0


# -------- check tests --------


def test_check_valid_file(tmp_path: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]) -> None:
    """check exits with 0 and prints notes for types without deserializer."""
    source = _write(tmp_path / "mirrors.yaml", VALID)
    assert _run(monkeypatch, "check", str(source)) == 0
    captured = capsys.readouterr()
    assert "Checking 2 mirror type(s)" in captured.out
    assert "NotReconstructable" in captured.err
    assert "No issues found." in captured.out


def test_check_reports_errors(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    """check exits with 1 and reports every error on stderr."""
    source = _write(tmp_path / "mirrors.yaml", BROKEN)
    assert _run(monkeypatch, "check", str(source)) == 1
    err = capsys.readouterr().err
    assert "MissingRemoteType" in err
    assert "GetterOwnedWithoutGetter" in err
    assert "field 'a'" in err


def test_check_several_files(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """check fails if any of the files has errors but still checks all of them."""
    good = _write(tmp_path / "good.yaml", VALID)
    bad = _write(tmp_path / "bad.yaml", BROKEN)
    assert _run(monkeypatch, "check", str(good), str(bad)) == 1


def test_check_missing_file(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    """check exits with 1 for a file that does not exist."""
    assert _run(monkeypatch, "check", str(tmp_path / "absent.yaml")) == 1
    assert "not found" in capsys.readouterr().err


# -------- generate tests --------


def test_generate_writes_module(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    """generate writes the module next to the declaration file."""
    source = _write(tmp_path / "mirrors.yaml", VALID)
    assert _run(monkeypatch, "generate", str(source)) == 0
    output = tmp_path / "mirrors.py"
    assert output.exists()
    assert "class Example(MirrorAdapter):" in output.read_text(encoding="utf-8")
    out = capsys.readouterr().out
    assert "Generated 2 mirror type(s)" in out
    assert "without deserializer: MirrorPath" in out


def test_generate_up_to_date(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    """generate skips a module that is newer than its declaration file unless forced."""
    source = _write(tmp_path / "mirrors.yaml", VALID)
    _run(monkeypatch, "generate", str(source))
    capsys.readouterr()
    assert _run(monkeypatch, "generate", str(source)) == 0
    assert "is up to date" in capsys.readouterr().out
    assert _run(monkeypatch, "generate", str(source), "--force") == 0
    assert "Generated" in capsys.readouterr().out


def test_generate_explicit_output(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    source = _write(tmp_path / "mirrors.yaml", VALID)
    output = tmp_path / "out" / "adapters.py"
    assert _run(monkeypatch, "generate", str(source), "-o", str(output)) == 0
    assert output.exists()


def test_generate_with_errors(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    """generate exits with 1 and writes nothing when a type has errors."""
    source = _write(tmp_path / "mirrors.yaml", BROKEN)
    assert _run(monkeypatch, "generate", str(source)) == 1
    assert not (tmp_path / "mirrors.py").exists()
    assert "not writing" in capsys.readouterr().err


def test_generate_invalid_file(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    source = _write(tmp_path / "mirrors.yaml", "types: nope\n")
    assert _run(monkeypatch, "generate", str(source)) == 1


# -------- table tests --------


def test_table_to_stdout(tmp_path: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]) -> None:
    """table prints the JSON artifact when no output is given."""
    source = _write(tmp_path / "mirrors.yaml", VALID)
    assert _run(monkeypatch, "table", str(source)) == 0
    artifact = json.loads(capsys.readouterr().out)
    assert [t["name"] for t in artifact["tables"]] == ["MirrorPath", "Example"]


def test_table_to_file(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    source = _write(tmp_path / "mirrors.yaml", VALID)
    output = tmp_path / "tables" / "mirrors.archwith.json"
    assert _run(monkeypatch, "table", str(source), "-o", str(output)) == 0
    assert json.loads(output.read_text(encoding="utf-8"))["v"] == "1"


def test_table_with_errors(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    source = _write(tmp_path / "mirrors.yaml", BROKEN)
    assert _run(monkeypatch, "table", str(source)) == 1
