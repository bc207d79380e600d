# Copyright 2026 archwith Contributors
# SPDX-License-Identifier: Apache-2.0

"""Tests for emission of deserialize units."""

import pytest

from archwith.compiler.directives import parse_directives
from archwith.compiler.emit_deserialize import emit_deserialize
from archwith.compiler.ir_builder import build
from archwith.compiler.validator import validate
from archwith.model.directives import FieldDecl, MirrorDecl, Shape, VariantDecl
from archwith.model.mapping import FieldMappingTable
from archwith.model.paths import type_path

# ###############
# Helpers
# ###############


def _field(name: str, mirror_type: str, *directives: str) -> FieldDecl:
    return FieldDecl(name=name, mirror_type=type_path(mirror_type), directives=list(directives))


def _table(
    *fields: FieldDecl,
    directives: str = "from(remote_lib.Remote)",
    shape: Shape = Shape.NAMED,
) -> FieldMappingTable:
    decl = MirrorDecl(name="Example", shape=shape, directives=[directives], fields=list(fields))
    result = validate(build(decl, parse_directives(decl)))
    assert result.table is not None
    return result.table


# ###############
# Gating
# ###############


class TestGating:
    def test_emitted_when_no_field_uses_a_getter(self) -> None:
        assert emit_deserialize(_table(_field("a", "int"))) is not None

    def test_omitted_when_any_field_uses_a_getter(self) -> None:
        table = _table(_field("a", "int"), _field("private_field", "str", 'getter = "owner.read"'))
        assert emit_deserialize(table) is None

    def test_omitted_for_owned_getter(self) -> None:
        table = _table(_field("a", "int", 'getter = "owner.take", getter_owned'))
        assert emit_deserialize(table) is None

    def test_unvalidated_table_is_rejected(self) -> None:
        decl = MirrorDecl(name="Example", directives=["from(remote_lib.Remote)"])
        with pytest.raises(ValueError, match="not been validated"):
            emit_deserialize(build(decl, parse_directives(decl)))


# ###############
# Generated Code
# ###############


class TestConstructor:
    def test_named_fields_use_keywords(self) -> None:
        table = _table(_field("a", "int"), _field("b", "str", "from(pathlib.PurePath), via(conv.AsString)"))
        unit = emit_deserialize(table)
        assert unit is not None
        assert "class _ExampleDeserialize:" in unit.body
        assert (
            "def into_remote_lib_Remote(field: ArchivedExample, deserializer: typing.Any) -> remote_lib.Remote:"
            in unit.body
        )
        assert "return remote_lib.Remote(" in unit.body
        assert "a=Identity.deserialize_with(field.a, deserializer)," in unit.body
        assert "b=conv.AsString.deserialize_with(field.b, deserializer)," in unit.body
        assert unit.imports == frozenset({"typing", "remote_lib", "conv"})
        assert unit.runtime_names == frozenset({"Identity"})

    def test_registration(self) -> None:
        unit = emit_deserialize(_table(_field("a", "int")))
        assert unit is not None
        assert unit.body.endswith(
            "Example.register_deserializer(remote_lib.Remote, _ExampleDeserialize.into_remote_lib_Remote)"
        )

    def test_positional_fields_use_positional_arguments(self) -> None:
        table = _table(_field("0", "int"), _field("1", "str"), shape=Shape.POSITIONAL)
        unit = emit_deserialize(table)
        assert unit is not None
        assert "Identity.deserialize_with(field._0, deserializer),\n" in unit.body
        assert "Identity.deserialize_with(field._1, deserializer),\n" in unit.body
        assert "=Identity" not in unit.body

    def test_unit_shape_calls_constructor_without_arguments(self) -> None:
        unit = emit_deserialize(_table(shape=Shape.UNIT))
        assert unit is not None
        assert "return remote_lib.Remote()" in unit.body

    def test_converter_chain_is_unwrapped(self) -> None:
        unit = emit_deserialize(_table(_field("b", "str", "via(conv.A, conv.B, conv.C)")))
        assert unit is not None
        assert "b=conv.A.deserialize_with(field.b, deserializer).into_inner().into_inner()," in unit.body

    def test_one_constructor_per_remote(self) -> None:
        table = _table(_field("a", "int"), directives="from(remote_lib.First), from(remote_lib.Second)")
        unit = emit_deserialize(table)
        assert unit is not None
        assert "def into_remote_lib_First(" in unit.body
        assert "def into_remote_lib_Second(" in unit.body
        assert "Example.register_deserializer(remote_lib.First, _ExampleDeserialize.into_remote_lib_First)" in unit.body
        registration = "Example.register_deserializer(remote_lib.Second, _ExampleDeserialize.into_remote_lib_Second)"
        assert registration in unit.body

    def test_mirror_field_names_its_from_type(self) -> None:
        unit = emit_deserialize(_table(_field("b", "MirrorPath", "from(pathlib.PurePath)")))
        assert unit is not None
        assert "b=MirrorPath.deserialize_with(field.b, deserializer, into=pathlib.PurePath)," in unit.body
        assert "pathlib" in unit.imports

    def test_via_field_passes_no_target(self) -> None:
        unit = emit_deserialize(_table(_field("b", "str", "from(pathlib.PurePath), via(conv.AsString)")))
        assert unit is not None
        assert "b=conv.AsString.deserialize_with(field.b, deserializer)," in unit.body
        assert "pathlib" not in unit.imports

    def test_clashing_remote_identifiers_are_numbered(self) -> None:
        unit = emit_deserialize(_table(_field("a", "int"), directives="from(pkg.A_B, pkg_A.B)"))
        assert unit is not None
        assert "def into_pkg_A_B__0(field: ArchivedExample, deserializer: typing.Any) -> pkg.A_B:" in unit.body
        assert "def into_pkg_A_B__1(field: ArchivedExample, deserializer: typing.Any) -> pkg_A.B:" in unit.body
        assert "Example.register_deserializer(pkg_A.B, _ExampleDeserialize.into_pkg_A_B__1)" in unit.body


# ###############
# Variants
# ###############


def _variants_table(*variants: VariantDecl) -> FieldMappingTable:
    decl = MirrorDecl(
        name="Example",
        shape=Shape.VARIANTS,
        directives=["from(remote_lib.Event)"],
        variants=list(variants),
    )
    result = validate(build(decl, parse_directives(decl)))
    assert result.table is not None
    return result.table


class TestVariants:
    def test_archived_class_selects_the_variant(self) -> None:
        table = _variants_table(
            VariantDecl(name="Idle", shape=Shape.UNIT),
            VariantDecl(name="Moved", shape=Shape.POSITIONAL, fields=[_field("0", "int"), _field("1", "int")]),
            VariantDecl(name="Renamed", fields=[_field("new", "str")]),
        )
        unit = emit_deserialize(table)
        assert unit is not None
        assert (
            "def into_remote_lib_Event(field: ArchivedExample.Idle | ArchivedExample.Moved | ArchivedExample.Renamed, "
            "deserializer: typing.Any) -> remote_lib.Event:\n"
            "        if isinstance(field, ArchivedExample.Idle):\n"
            "            return remote_lib.Event.Idle()\n"
            "        if isinstance(field, ArchivedExample.Moved):\n"
            "            return remote_lib.Event.Moved(\n"
            "                Identity.deserialize_with(field._0, deserializer),\n"
            "                Identity.deserialize_with(field._1, deserializer),\n"
            "            )\n"
            "        if isinstance(field, ArchivedExample.Renamed):\n"
            "            return remote_lib.Event.Renamed(\n"
            "                new=Identity.deserialize_with(field.new, deserializer),\n"
            "            )\n"
            '        raise TypeError(f"{type(field).__qualname__} is not an archived variant of Example")\n'
        ) in unit.body

    def test_getter_inside_a_variant_disables_deserialize(self) -> None:
        table = _variants_table(
            VariantDecl(name="Idle", shape=Shape.UNIT),
            VariantDecl(name="Sealed", fields=[_field("secret", "str", 'getter = "owner.read"')]),
        )
        assert emit_deserialize(table) is None

    def test_variant_field_imports(self) -> None:
        table = _variants_table(VariantDecl(name="Path", fields=[_field("p", "MirrorPath", "from(pathlib.PurePath)")]))
        unit = emit_deserialize(table)
        assert unit is not None
        assert {"pathlib", "remote_lib", "typing"} <= unit.imports
        assert "p=MirrorPath.deserialize_with(field.p, deserializer, into=pathlib.PurePath)," in unit.body
