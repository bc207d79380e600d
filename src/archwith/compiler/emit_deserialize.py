# Copyright 2026 archwith Contributors
# SPDX-License-Identifier: Apache-2.0

"""Emission of the logic that rebuilds remote instances from their archived representation."""

from __future__ import annotations

from archwith.compiler.codegen import (
    EmittedUnit,
    UnitKind,
    archived_name,
    converter_runtime_names,
    deserialize_expr,
    deserialize_function_name,
    deserialize_imports,
    deserialize_unit_name,
    indent,
    member_name,
    variant_union,
)
from archwith.model.directives import Shape
from archwith.model.mapping import FieldMappingTable, FieldSpec
from archwith.model.paths import TypePath

# ###############
# Public Interface
# ###############


def emit_deserialize(table: FieldMappingTable) -> EmittedUnit | None:
    """Emit the deserialize unit of a mirror type.

    The unit holds one constructor function per remote type and registers
    each with the mirror adapter. Every field is deserialized through its
    converter in declaration order and the remote type is constructed from
    the results (keyword arguments for named fields, positional arguments for
    positional fields). For a variants type the archived variant class picks
    which remote variant class is constructed.

    Returns:
        The unit, or None when a field is read through a getter: private
        state cannot be restored automatically, so the user must register a
        deserializer by hand.

    Raises:
        ValueError: If *table* has not been validated.
    """
    if not table.validated:
        raise ValueError(f"Field mapping table of '{table.type_name}' has not been validated")
    if not table.fully_reconstructable:
        return None

    archived = archived_name(table)
    unit = deserialize_unit_name(table)
    remotes = ", ".join(f"``{remote.reference()}``" for remote in table.remote_types)

    lines = [
        f"class {unit}:",
        f'    """Rebuilds {remotes} from ``{archived}``."""',
    ]
    for remote in table.remote_types:
        lines.append("")
        lines.extend(indent(_constructor(table, remote)))

    lines.append("")
    lines.append("")
    for remote in table.remote_types:
        function = deserialize_function_name(table, remote)
        lines.append(f"{table.type_name}.register_deserializer({remote.reference()}, {unit}.{function})")

    imports = {"typing"}
    runtime_names: set[str] = set()
    for remote in table.remote_types:
        imports |= remote.modules()
    for _, spec in table.labelled_fields():
        imports |= deserialize_imports(spec)
        runtime_names |= converter_runtime_names(spec)

    return EmittedUnit(
        type_name=table.type_name,
        kind=UnitKind.DESERIALIZE,
        body="\n".join(lines),
        imports=frozenset(imports),
        runtime_names=frozenset(runtime_names),
    )


# ################
# Implementation
# ################


def _constructor(table: FieldMappingTable, remote: TypePath) -> list[str]:
    remote_ref = remote.reference()
    archived = archived_name(table)

    if table.shape is Shape.VARIANTS:
        body: list[str] = []
        for name, variant in table.variants.items():
            target = variant.variant_path(remote).reference()
            body.append(f"if isinstance(field, {archived}.{name}):")
            body.extend(indent(_build(target, variant.fields, variant.shape)))
        not_a_variant = f"is not an archived variant of {table.type_name}"
        body.append(f'raise TypeError(f"{{type(field).__qualname__}} {not_a_variant}")')
        field_type = variant_union(archived, table)
    else:
        body = _build(remote_ref, table.fields, table.shape)
        field_type = archived

    function = deserialize_function_name(table, remote)
    return [
        "@staticmethod",
        f"def {function}(field: {field_type}, deserializer: typing.Any) -> {remote_ref}:",
        *indent(body),
    ]


def _build(target: str, fields: dict[str, FieldSpec], shape: Shape) -> list[str]:
    """Render ``return target(...)`` restoring every field of one field group."""
    args: list[str] = []
    for spec in fields.values():
        value = deserialize_expr(spec, f"field.{member_name(spec, shape)}")
        if shape is Shape.POSITIONAL:
            args.append(f"{value},")
        else:
            args.append(f"{spec.name}={value},")

    if not args:
        return [f"return {target}()"]
    return [f"return {target}(", *indent(args), ")"]