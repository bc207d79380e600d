# Copyright 2026 archwith Contributors
# SPDX-License-Identifier: Apache-2.0

"""Tests for building Field Mapping Tables from parsed directives."""

from archwith.compiler.directives import parse_directives
from archwith.compiler.ir_builder import build
from archwith.model.directives import FieldDecl, MirrorDecl, Shape, VariantDecl
from archwith.model.mapping import ConverterKind, FieldMappingTable
from archwith.model.paths import type_path

# ###############
# Test Helpers
# ###############


def _field(name: str, mirror_type: str, *directives: str) -> FieldDecl:
    return FieldDecl(name=name, mirror_type=type_path(mirror_type), directives=list(directives))


def _build(
    *fields: FieldDecl,
    directives: str = "from(remote.Remote)",
    shape: Shape = Shape.NAMED,
) -> FieldMappingTable:
    decl = MirrorDecl(name="Example", shape=shape, directives=[directives], fields=list(fields))
    return build(decl, parse_directives(decl))


# ###############
# Converter Inference
# ###############


class TestConverterInference:
    def test_no_directives_is_identity(self) -> None:
        table = _build(_field("a", "int"))
        spec = table.fields["a"]
        assert spec.converter.kind is ConverterKind.IDENTITY
        assert spec.converter.is_identity
        assert spec.converter.outer is None
        assert spec.getter is None

    def test_from_without_via_uses_the_field_type(self) -> None:
        table = _build(_field("b", "MirrorPath", "from(pathlib.PurePath)"))
        spec = table.fields["b"]
        assert spec.converter.kind is ConverterKind.SELF
        assert spec.converter.chain == (type_path("MirrorPath"),)
        assert spec.source_type == type_path("pathlib.PurePath")

    def test_via_is_used_verbatim(self) -> None:
        table = _build(_field("b", "str", "via(conv.AsString)"))
        spec = table.fields["b"]
        assert spec.converter.kind is ConverterKind.VIA
        assert spec.converter.chain == (type_path("conv.AsString"),)

    def test_via_wins_over_from(self) -> None:
        table = _build(_field("b", "MirrorPath", "from(pathlib.PurePath), via(conv.A, conv.B)"))
        spec = table.fields["b"]
        assert spec.converter.kind is ConverterKind.VIA
        assert spec.converter.chain == (type_path("conv.A"), type_path("conv.B"))
        assert spec.converter.outer == type_path("conv.A")

    def test_with_wrappers_without_from(self) -> None:
        table = _build(_field("c", "bytes", "with(conv.Compressed)"))
        spec = table.fields["c"]
        assert spec.converter.kind is ConverterKind.WITH
        assert spec.converter.chain == (type_path("conv.Compressed"),)

    def test_from_wins_over_with(self) -> None:
        table = _build(_field("c", "MirrorPath", "from(pathlib.PurePath), with(conv.Compressed)"))
        assert table.fields["c"].converter.kind is ConverterKind.SELF


# ###############
# Getters
# ###############


class TestGetters:
    def test_getter_is_recorded(self) -> None:
        table = _build(_field("inner", "str", 'getter = "remote.get_inner"'))
        getter = table.fields["inner"].getter
        assert getter is not None
        assert getter.path == type_path("remote.get_inner")
        assert not getter.owned

    def test_getter_owned(self) -> None:
        table = _build(_field("inner", "str", 'getter = "remote.take_inner", getter_owned'))
        getter = table.fields["inner"].getter
        assert getter is not None
        assert getter.owned

    def test_getter_owned_without_getter_is_kept_raw(self) -> None:
        table = _build(_field("inner", "str", "getter_owned"))
        spec = table.fields["inner"]
        assert spec.getter is None
        assert spec.getter_owned


# ###############
# Table Shape
# ###############


class TestTable:
    def test_field_order_and_indices(self) -> None:
        table = _build(_field("z", "int"), _field("a", "int"), _field("m", "int"))
        assert list(table.fields) == ["z", "a", "m"]
        assert [spec.index for spec in table.fields.values()] == [0, 1, 2]

    def test_remote_types_copied(self) -> None:
        table = _build(_field("a", "int"), directives="from(remote.A, remote.B)")
        assert table.remote_types == (type_path("remote.A"), type_path("remote.B"))

    def test_missing_remote_type_is_not_inferred(self) -> None:
        decl = MirrorDecl(name="Example", fields=[_field("a", "int")])
        table = build(decl, parse_directives(decl))
        assert table.remote_types == ()

    def test_table_is_unvalidated(self) -> None:
        table = _build(_field("a", "int"))
        assert not table.validated
        assert not table.fields["a"].reconstructable

    def test_shape_is_copied(self) -> None:
        table = _build(_field("0", "int"), shape=Shape.POSITIONAL)
        assert table.shape is Shape.POSITIONAL

    def test_build_is_deterministic(self) -> None:
        fields = (_field("a", "int"), _field("b", "MirrorPath", "from(pathlib.PurePath)"))
        assert _build(*fields) == _build(*fields)


# ###############
# Variants
# ###############


class TestVariants:
    DECL = MirrorDecl(
        name="Example",
        shape=Shape.VARIANTS,
        directives=["from(remote.Event)"],
        variants=[
            VariantDecl(name="Idle", shape=Shape.UNIT),
            VariantDecl(name="Moved", shape=Shape.POSITIONAL, fields=[_field("0", "int"), _field("1", "int")]),
            VariantDecl(
                name="Renamed",
                fields=[_field("old", "MirrorPath", "from(pathlib.PurePath)"), _field("new", "str", "via(conv.S)")],
            ),
        ],
    )

    def _build(self) -> FieldMappingTable:
        return build(self.DECL, parse_directives(self.DECL))

    def test_variants_keep_declaration_order(self) -> None:
        table = self._build()
        assert table.shape is Shape.VARIANTS
        assert table.fields == {}
        assert list(table.variants) == ["Idle", "Moved", "Renamed"]
        assert [v.shape for v in table.variants.values()] == [Shape.UNIT, Shape.POSITIONAL, Shape.NAMED]

    def test_fields_are_indexed_per_variant(self) -> None:
        table = self._build()
        assert [spec.index for spec in table.variants["Moved"].fields.values()] == [0, 1]
        assert [spec.index for spec in table.variants["Renamed"].fields.values()] == [0, 1]

    def test_variant_fields_use_inference_rules(self) -> None:
        renamed = self._build().variants["Renamed"]
        assert renamed.fields["old"].converter.kind is ConverterKind.SELF
        assert renamed.fields["new"].converter.kind is ConverterKind.VIA
        assert self._build().variants["Moved"].fields["0"].converter.is_identity

    def test_labelled_fields_qualify_variant_fields(self) -> None:
        labels = [label for label, _ in self._build().labelled_fields()]
        assert labels == ["Moved.0", "Moved.1", "Renamed.old", "Renamed.new"]
