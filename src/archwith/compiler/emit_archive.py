# Copyright 2026 archwith Contributors
# SPDX-License-Identifier: Apache-2.0

"""Emission of the archived representation and the build/serialize logic.

For a validated table the emitter produces one representation unit shared
by all remote types (the archived dataclass, the resolver dataclass, and the
mirror adapter class), then one archive unit per remote type. Archive units
are structurally identical and differ only in the remote type they read from.

A variants type gets a tagged union instead: the archived and resolver
classes are namespaces holding one frozen dataclass per variant, and the
archive unit picks the variant by the class of the remote value.
"""

from __future__ import annotations

from archwith.compiler.codegen import (
    EmittedUnit,
    UnitKind,
    archive_unit_name,
    archived_annotation,
    archived_name,
    converter_imports,
    converter_ref,
    converter_runtime_names,
    indent,
    member_name,
    read_expr,
    resolver_name,
    variant_union,
    wrap_expr,
)
from archwith.model.directives import Shape
from archwith.model.mapping import FieldMappingTable, FieldSpec
from archwith.model.paths import TypePath

# ###############
# Public Interface
# ###############


def emit_archive(table: FieldMappingTable) -> list[EmittedUnit]:
    """Emit the representation unit followed by one archive unit per remote type.

    Args:
        table: A table accepted by the validator.

    Returns:
        The representation unit, then the archive units in the order the
        remote types were declared.

    Raises:
        ValueError: If *table* has not been validated.
    """
    if not table.validated:
        raise ValueError(f"Field mapping table of '{table.type_name}' has not been validated")

    units = [emit_representation(table)]
    units.extend(emit_archive_unit(table, remote) for remote in table.remote_types)
    return units


def emit_representation(table: FieldMappingTable) -> EmittedUnit:
    """Emit the archived dataclass, the resolver dataclass, and the mirror adapter class."""
    archived = archived_name(table)
    resolver = resolver_name(table)
    remotes = ", ".join(f"``{remote.reference()}``" for remote in table.remote_types)

    if table.shape is Shape.VARIANTS:
        archived_lines = _namespace(
            archived,
            f"Archived representation of ``{table.type_name}``, one class per variant.",
            [
                _dataclass(name, f"Archived variant ``{name}``.", _archived_members(variant.fields, variant.shape))
                for name, variant in table.variants.items()
            ],
        )
        resolver_lines = _namespace(
            resolver,
            f"Resolver tokens of ``{table.type_name}``, one class per variant.",
            [
                _dataclass(
                    name,
                    f"Resolver tokens of variant ``{name}``.",
                    _resolver_members(variant.fields, variant.shape),
                )
                for name, variant in table.variants.items()
            ],
        )
    else:
        archived_lines = _dataclass(
            archived,
            f"Archived representation of ``{table.type_name}``.",
            _archived_members(table.fields, table.shape),
        )
        resolver_lines = _dataclass(
            resolver,
            f"Resolver tokens of ``{table.type_name}``, one per field.",
            _resolver_members(table.fields, table.shape),
        )

    lines = [
        *archived_lines,
        "",
        "",
        *resolver_lines,
        "",
        "",
        f"class {table.type_name}(MirrorAdapter):",
        f'    """Stands in for {remotes}."""',
        "",
        f"    Archived = {archived}",
        f"    Resolver = {resolver}",
    ]

    imports = {"dataclasses", "typing"}
    runtime_names = {"MirrorAdapter"}
    for _, spec in table.labelled_fields():
        imports |= converter_imports(spec)
        if spec.converter.is_identity:
            imports |= spec.mirror_type.modules()
            runtime_names.add("Archived")

    return EmittedUnit(
        type_name=table.type_name,
        kind=UnitKind.REPRESENTATION,
        body="\n".join(lines),
        imports=frozenset(imports),
        runtime_names=frozenset(runtime_names),
    )


def emit_archive_unit(table: FieldMappingTable, remote: TypePath) -> EmittedUnit:
    """Emit ``serialize_with`` and ``resolve_with`` for one remote type, and register them."""
    archived = archived_name(table)
    resolver = resolver_name(table)
    unit = archive_unit_name(table, remote)
    remote_ref = remote.reference()

    if table.shape is Shape.VARIANTS:
        serialize_body: list[str] = []
        resolve_body: list[str] = []
        for name, variant in table.variants.items():
            check = f"if isinstance(field, {variant.variant_path(remote).reference()}):"
            serialize_args, resolve_args = _field_args(variant.fields, variant.shape)
            serialize_body += [check, *indent(_call(f"{resolver}.{name}", serialize_args))]
            resolve_body += [check, *indent(_call(f"{archived}.{name}", resolve_args))]
        not_a_variant = f'raise TypeError(f"{{type(field).__qualname__}} is not a variant of {remote_ref}")'
        serialize_body.append(not_a_variant)
        resolve_body.append(not_a_variant)
        resolver_type = variant_union(resolver, table)
        archived_type = variant_union(archived, table)
        variant_refs = [variant.variant_path(remote).reference() for variant in table.variants.values()]
        registration = f"{table.type_name}.register({remote_ref}, {unit}, variants=({_tuple_items(variant_refs)}))"
    else:
        serialize_args, resolve_args = _field_args(table.fields, table.shape)
        serialize_body = _call(resolver, serialize_args)
        resolve_body = _call(archived, resolve_args)
        resolver_type = resolver
        archived_type = archived
        registration = f"{table.type_name}.register({remote_ref}, {unit})"

    lines = [
        f"class {unit}:",
        f'    """Archives ``{remote_ref}`` through ``{table.type_name}``."""',
        "",
        "    @staticmethod",
        f"    def serialize_with(field: {remote_ref}, serializer: typing.Any) -> {resolver_type}:",
        *indent(serialize_body, 2),
        "",
        "    @staticmethod",
        f"    def resolve_with(field: {remote_ref}, pos: int, resolver: {resolver_type}) -> {archived_type}:",
        *indent(resolve_body, 2),
        "",
        "",
        registration,
    ]

    imports = {"typing"} | remote.modules()
    runtime_names: set[str] = set()
    for _, spec in table.labelled_fields():
        imports |= converter_imports(spec)
        runtime_names |= converter_runtime_names(spec)
        if spec.getter is not None:
            imports |= spec.getter.path.modules()
            if spec.getter.owned:
                imports.add("copy")

    return EmittedUnit(
        type_name=table.type_name,
        kind=UnitKind.ARCHIVE,
        body="\n".join(lines),
        remote_type=remote,
        imports=frozenset(imports),
        runtime_names=frozenset(runtime_names),
    )


# ################
# Implementation
# ################


def _archived_members(fields: dict[str, FieldSpec], shape: Shape) -> list[str]:
    return [f"{member_name(spec, shape)}: {archived_annotation(spec)}" for spec in fields.values()]


def _resolver_members(fields: dict[str, FieldSpec], shape: Shape) -> list[str]:
    return [f"{member_name(spec, shape)}: typing.Any" for spec in fields.values()]


def _field_args(fields: dict[str, FieldSpec], shape: Shape) -> tuple[list[str], list[str]]:
    """Return the keyword arguments building the resolver and the archived value of one field group."""
    serialize_args: list[str] = []
    resolve_args: list[str] = []
    for spec in fields.values():
        member = member_name(spec, shape)
        value = wrap_expr(spec, read_expr(spec, shape))
        converter = converter_ref(spec)
        serialize_args.append(f"{member}={converter}.serialize_with({value}, serializer),")
        resolve_args.append(f"{member}={converter}.resolve_with({value}, pos, resolver.{member}),")
    return serialize_args, resolve_args


def _dataclass(name: str, doc: str, members: list[str]) -> list[str]:
    lines = [
        "@dataclasses.dataclass(frozen=True)",
        f"class {name}:",
        f'    """{doc}"""',
    ]
    if members:
        lines += ["", *indent(members)]
    return lines


def _namespace(name: str, doc: str, classes: list[list[str]]) -> list[str]:
    lines = [f"class {name}:", f'    """{doc}"""']
    for body in classes:
        lines += ["", *indent(body)]
    return lines


def _call(callee: str, args: list[str]) -> list[str]:
    """Render ``return callee(...)`` with one argument per line."""
    if not args:
        return [f"return {callee}()"]
    return [f"return {callee}(", *indent(args), ")"]


def _tuple_items(items: list[str]) -> str:
    text = ", ".join(items)
    return text + "," if len(items) == 1 else text