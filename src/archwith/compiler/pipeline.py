# Copyright 2026 archwith Contributors
# SPDX-License-Identifier: Apache-2.0

"""Per-type compilation pipeline: directives, mapping table, validation, emission.

Each mirror type is compiled on its own. Diagnostics are collected per type
and a failure in one type never stops its siblings. Re-running the pipeline
on unchanged declarations yields identical output.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from archwith.compiler.codegen import EmittedUnit, UnitKind, render_module
from archwith.compiler.directives import DirectiveSyntaxError, parse_directives, parse_type_directives
from archwith.compiler.emit_archive import emit_archive
from archwith.compiler.emit_deserialize import emit_deserialize
from archwith.compiler.ir_builder import build
from archwith.compiler.validator import validate
from archwith.model.diagnostics import Diagnostic, DiagnosticKind
from archwith.model.directives import MirrorDecl
from archwith.model.mapping import FieldMappingTable
from archwith.model.paths import TypePath

# ###############
# Public Interface
# ###############


@dataclass
class CompileResult:
    """Outcome of compiling one mirror type.

    Attributes:
        type_name: Name of the mirror type.
        table: The validated Field Mapping Table, or None if compilation failed.
        units: Emitted units; empty if compilation failed.
        diagnostics: Errors and notes, in the order they were found.
    """

    type_name: str
    table: FieldMappingTable | None = None
    units: list[EmittedUnit] = field(default_factory=list)
    diagnostics: list[Diagnostic] = field(default_factory=list)

    @property
    def errors(self) -> list[Diagnostic]:
        return [d for d in self.diagnostics if d.is_error]

    @property
    def notes(self) -> list[Diagnostic]:
        return [d for d in self.diagnostics if not d.is_error]

    @property
    def has_errors(self) -> bool:
        """Return True if emission was skipped because of an error."""
        return any(d.is_error for d in self.diagnostics)

    @property
    def has_deserializer(self) -> bool:
        """Return True if a deserialize unit was emitted."""
        return any(unit.kind is UnitKind.DESERIALIZE for unit in self.units)


def compile_mirror(
    decl: MirrorDecl,
    *,
    known_mirrors: dict[str, tuple[TypePath, ...]] | None = None,
) -> CompileResult:
    """Run the full pipeline for one mirror type.

    Args:
        decl: The mirror type declaration.
        known_mirrors: Remote types of the mirror types compiled alongside
            *decl*, used by the validator's converter check.

    Returns:
        A :class:`CompileResult`; never raises for problems in *decl*.
    """
    result = CompileResult(type_name=decl.name)

    try:
        directives = parse_directives(decl)
    except DirectiveSyntaxError as exc:
        result.diagnostics.append(
            Diagnostic(
                kind=DiagnosticKind.SYNTAX,
                message=str(exc),
                type_name=decl.name,
                field_name=exc.field_name,
            )
        )
        return result

    validation = validate(build(decl, directives), known_mirrors=known_mirrors)
    result.diagnostics.extend(validation.errors)
    result.diagnostics.extend(validation.notes)
    if validation.table is None:
        return result

    result.table = validation.table
    result.units.extend(emit_archive(validation.table))
    deserialize_unit = emit_deserialize(validation.table)
    if deserialize_unit is not None:
        result.units.append(deserialize_unit)
    return result


def compile_mirrors(decls: list[MirrorDecl]) -> list[CompileResult]:
    """Compile several mirror types independently, in declaration order."""
    known = known_mirror_types(decls)
    return [compile_mirror(decl, known_mirrors=known) for decl in decls]


def known_mirror_types(decls: list[MirrorDecl]) -> dict[str, tuple[TypePath, ...]]:
    """Return the declared remote types of every mirror whose type-level directives parse.

    Mirrors with malformed type-level directives are left out; converter
    checks against them are skipped.
    """
    known: dict[str, tuple[TypePath, ...]] = {}
    for decl in decls:
        try:
            known[decl.name] = parse_type_directives(decl.directives).remote_types
        except DirectiveSyntaxError:
            continue
    return known


def render(results: list[CompileResult], *, source_label: str | None = None) -> str:
    """Render the units of every successfully compiled mirror type into one module."""
    units = [unit for result in results for unit in result.units]
    return render_module(units, source_label=source_label)
