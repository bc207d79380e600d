# Copyright 2026 archwith Contributors
# SPDX-License-Identifier: Apache-2.0

"""Code fragments shared by the emitters, and assembly of emitted units into a module."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from archwith.model.directives import Shape
from archwith.model.mapping import ConverterKind, FieldMappingTable, FieldSpec
from archwith.model.paths import TypePath

# ###############
# Public Interface
# ###############

RUNTIME_MODULE = "archwith.runtime"
INDENT = "    "

# Top-level names a generated module binds besides its mirror types.
RESERVED_NAMES = frozenset(
    {"Archived", "ArchivedWith", "Identity", "MirrorAdapter", "With", "copy", "dataclasses", "typing"}
)


class UnitKind(Enum):
    """What an emitted unit provides."""

    REPRESENTATION = "representation"
    ARCHIVE = "archive"
    DESERIALIZE = "deserialize"


@dataclass(frozen=True)
class EmittedUnit:
    """One generated block of Python source.

    Attributes:
        type_name: The mirror type the unit belongs to.
        kind: What the unit provides.
        remote_type: The remote type an archive unit reads from, None otherwise.
        body: Source text of the unit, without imports.
        imports: Modules the body needs imported.
        runtime_names: Names the body uses from :mod:`archwith.runtime`.
    """

    type_name: str
    kind: UnitKind
    body: str
    remote_type: TypePath | None = None
    imports: frozenset[str] = field(default_factory=frozenset)
    runtime_names: frozenset[str] = field(default_factory=frozenset)


def render_module(units: list[EmittedUnit], *, source_label: str | None = None) -> str:
    """Assemble emitted units into the source of one Python module.

    Imports of all units are merged, de-duplicated and sorted; unit bodies
    keep the order they are given in.
    """
    origin = f" from {source_label}" if source_label else ""
    lines = [
        f'"""Archive adapters generated by archwith{origin}. Do not edit."""',
        "",
        "from __future__ import annotations",
    ]

    modules = sorted({module for unit in units for module in unit.imports})
    if modules:
        lines.append("")
        lines.extend(f"import {module}" for module in modules)

    runtime_names = sorted({name for unit in units for name in unit.runtime_names})
    if runtime_names:
        lines.append("")
        lines.append(f"from {RUNTIME_MODULE} import {', '.join(runtime_names)}")

    for unit in units:
        lines.append("")
        lines.append("")
        lines.append(unit.body.rstrip("\n"))

    return "\n".join(lines) + "\n"


def generated_names(type_name: str) -> tuple[str, ...]:
    """Return the public top-level names the module generated for mirror *type_name* defines."""
    return (type_name, f"Archived{type_name}", f"{type_name}Resolver")


def archived_name(table: FieldMappingTable) -> str:
    return f"Archived{table.type_name}"


def resolver_name(table: FieldMappingTable) -> str:
    return f"{table.type_name}Resolver"


def remote_identifier(table: FieldMappingTable, remote: TypePath) -> str:
    """Return an identifier for *remote* that is unique among the remote types of *table*.

    :meth:`TypePath.identifier` maps ``pkg.A_B`` and ``pkg_A.B`` alike; such
    clashes get the remote's index appended after a double underscore, which
    plain identifiers never contain.
    """
    identifier = remote.identifier()
    clashes = [r for r in table.remote_types if r.identifier() == identifier]
    if len(clashes) > 1:
        return f"{identifier}__{table.remote_types.index(remote)}"
    return identifier


def archive_unit_name(table: FieldMappingTable, remote: TypePath) -> str:
    return f"_{table.type_name}From_{remote_identifier(table, remote)}"


def deserialize_unit_name(table: FieldMappingTable) -> str:
    return f"_{table.type_name}Deserialize"


def deserialize_function_name(table: FieldMappingTable, remote: TypePath) -> str:
    return f"into_{remote_identifier(table, remote)}"


def variant_union(namespace: str, table: FieldMappingTable) -> str:
    """Return the annotation naming any variant class nested in *namespace*.

    For example ``ArchivedEvent.A | ArchivedEvent.B``.
    """
    return " | ".join(f"{namespace}.{name}" for name in table.variants)


def member_name(spec: FieldSpec, shape: Shape) -> str:
    """Return the attribute name of a field inside the generated representation and resolver."""
    if shape is Shape.POSITIONAL:
        return f"_{spec.index}"
    return spec.name


def read_expr(spec: FieldSpec, shape: Shape, instance: str = "field") -> str:
    """Return the expression reading *spec* from the remote *instance*.

    Without a getter the field is read directly; an owned getter receives a
    deep copy so the original instance stays untouched.
    """
    if spec.getter is None:
        if shape is Shape.POSITIONAL:
            return f"{instance}[{spec.index}]"
        return f"{instance}.{spec.name}"
    if spec.getter.owned:
        return f"{spec.getter.path.reference()}(copy.deepcopy({instance}))"
    return f"{spec.getter.path.reference()}({instance})"


def converter_ref(spec: FieldSpec) -> str:
    """Return the expression naming the outermost converter of *spec*."""
    outer = spec.converter.outer
    return "Identity" if outer is None else outer.reference()


def wrap_expr(spec: FieldSpec, value: str) -> str:
    """Wrap *value* for the outermost converter: ``via(A, B, C)`` hands ``A`` the value ``With(With(v, C), B)``."""
    for inner in reversed(spec.converter.chain[1:]):
        value = f"With({value}, {inner.reference()})"
    return value


def unwrap_expr(spec: FieldSpec, value: str) -> str:
    """Undo :func:`wrap_expr` on a deserialized value."""
    return value + ".into_inner()" * max(len(spec.converter.chain) - 1, 0)


def deserialize_expr(spec: FieldSpec, archived: str) -> str:
    """Return the expression restoring *spec* from its archived member *archived*.

    A field converted by its own mirror type names its ``from`` type as the
    target, since that mirror may stand in for several remote types.
    """
    args = f"{archived}, deserializer"
    if spec.converter.kind is ConverterKind.SELF and spec.from_type is not None:
        args += f", into={spec.from_type.reference()}"
    return unwrap_expr(spec, f"{converter_ref(spec)}.deserialize_with({args})")


def archived_annotation(spec: FieldSpec) -> str:
    """Return the annotation of a field's member in the archived representation."""
    outer = spec.converter.outer
    if outer is None:
        return f"Archived[{spec.mirror_type.reference()}]"
    return f"{outer.reference()}.Archived"


def converter_imports(spec: FieldSpec) -> set[str]:
    """Return the modules needed to reference the converters of *spec*."""
    modules: set[str] = set()
    for converter in spec.converter.chain:
        modules |= converter.modules()
    return modules


def deserialize_imports(spec: FieldSpec) -> set[str]:
    """Return the modules needed by :func:`deserialize_expr` for *spec*."""
    modules = converter_imports(spec)
    if spec.converter.kind is ConverterKind.SELF and spec.from_type is not None:
        modules |= spec.from_type.modules()
    return modules


def converter_runtime_names(spec: FieldSpec) -> set[str]:
    """Return the runtime names needed by the conversion code of *spec*."""
    names: set[str] = set()
    if spec.converter.is_identity:
        names.add("Identity")
    if len(spec.converter.chain) > 1:
        names.add("With")
    return names


def indent(lines: list[str], depth: int = 1) -> list[str]:
    """Indent every non-empty line by *depth* levels."""
    prefix = INDENT * depth
    return [prefix + line if line else line for line in lines]
