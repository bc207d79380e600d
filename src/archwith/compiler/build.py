# Copyright 2026 archwith Contributors
# SPDX-License-Identifier: Apache-2.0

"""Incremental generation of adapter modules from mirror declaration files.

Implements a CMake-style cache: the generated module is reused when it
already exists and is strictly newer than its declaration file. A module is
only written when every mirror type in the file compiled without errors, so
an existing output always corresponds to a clean compilation.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from archwith.compiler.pipeline import CompileResult, compile_mirrors, render
from archwith.config.mirror_file import MirrorFileError, load_mirror_file

# ###############
# Public Interface
# ###############


class BuildError(Exception):
    """Raised when a declaration file cannot be loaded or the output cannot be written."""

    def __init__(self, message: str) -> None:
        super().__init__(message)


@dataclass
class GenerateResult:
    """Outcome of generating one adapter module.

    Attributes:
        output: Path of the generated module.
        results: Per-type compile results; empty when the cache was used.
        written: True if the output file was (re)written.
        up_to_date: True if the existing output was reused without compiling.
    """

    output: Path
    results: list[CompileResult] = field(default_factory=list)
    written: bool = False
    up_to_date: bool = False

    @property
    def has_errors(self) -> bool:
        return any(r.has_errors for r in self.results)


def default_output_path(source: Path, configured: str | None = None) -> Path:
    """Return where the module generated from *source* goes.

    A path configured in the declaration file is relative to that file;
    otherwise the module sits next to it with a ``.py`` suffix
    (``mirrors.yaml`` becomes ``mirrors.py``).
    """
    if configured is not None:
        return source.parent / configured
    return source.with_suffix(".py")


def generate_file(source: Path, output: Path | None = None, *, force: bool = False) -> GenerateResult:
    """Compile a declaration file and write the generated module.

    Args:
        source: Path to the YAML declaration file.
        output: Explicit output path; overrides the file's ``output`` entry.
        force: Regenerate even if the output is newer than *source*.

    Returns:
        A :class:`GenerateResult`. When any mirror type has errors nothing
        is written and the diagnostics are available in ``results``.

    Raises:
        BuildError: If the declaration file is invalid or the output cannot be written.
    """
    try:
        mirror_file = load_mirror_file(source)
    except MirrorFileError as exc:
        raise BuildError(str(exc)) from exc

    target = output if output is not None else default_output_path(source, mirror_file.output)

    if not force and _is_up_to_date(source, target):
        return GenerateResult(output=target, up_to_date=True)

    results = compile_mirrors(mirror_file.types)
    generated = GenerateResult(output=target, results=results)
    if generated.has_errors:
        return generated

    try:
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(render(results, source_label=source.name), encoding="utf-8")
    except OSError as exc:
        raise BuildError(f"Cannot write generated module '{target}': {exc}") from exc

    generated.written = True
    return generated


# ################
# Implementation
# ################


def _is_up_to_date(source: Path, output: Path) -> bool:
    """Return True if *output* exists and is strictly newer than *source*."""
    if not output.exists():
        return False
    return output.stat().st_mtime > source.stat().st_mtime
