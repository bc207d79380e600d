# Copyright 2026 archwith Contributors
# SPDX-License-Identifier: Apache-2.0

"""Compiler pipeline for mirror types: directives, mapping tables, validation, and emission.

File-level generation lives in :mod:`archwith.compiler.build`, which depends
on :mod:`archwith.config` and is therefore not re-exported here.
"""

from archwith.compiler.artifact import ARTIFACT_SUFFIX, deserialize, read_artifact, serialize, write_artifact
from archwith.compiler.codegen import EmittedUnit, UnitKind, render_module
from archwith.compiler.directives import DirectiveSyntaxError, parse_directives, parse_type_path
from archwith.compiler.emit_archive import emit_archive
from archwith.compiler.emit_deserialize import emit_deserialize
from archwith.compiler.ir_builder import build
from archwith.compiler.pipeline import CompileResult, compile_mirror, compile_mirrors, render
from archwith.compiler.validator import ValidationResult, validate

__all__ = [
    "parse_type_path",
    "parse_directives",
    "DirectiveSyntaxError",
    "build",
    "validate",
    "ValidationResult",
    "emit_archive",
    "emit_deserialize",
    "EmittedUnit",
    "UnitKind",
    "render_module",
    "compile_mirror",
    "compile_mirrors",
    "CompileResult",
    "render",
    "serialize",
    "deserialize",
    "write_artifact",
    "read_artifact",
    "ARTIFACT_SUFFIX",
]
