# Copyright 2026 archwith Contributors
# SPDX-License-Identifier: Apache-2.0

"""Builds the Field Mapping Table of a mirror type from its parsed directives.

The builder applies the default-inference rules, one field at a time, in
this order:

1. Neither ``from`` nor ``via``: the value is passed through unchanged
   (identity converter), or through the field's own ``with(...)`` wrappers
   when it declares any.
2. ``from`` without ``via``: the field's own mirror type is the converter.
3. ``via``: the declared chain is used verbatim, whether or not ``from`` is
   also given.
4. Without ``getter`` the field is read directly from the remote instance;
   a ``getter`` overrides that, and ``getter_owned`` makes it take a copy of
   the instance by value.

Missing remote types are never inferred. The builder performs no checks; the
returned table is unvalidated.
"""

from __future__ import annotations

from archwith.model.directives import DirectiveModel, FieldDecl, FieldDirectives, MirrorDecl
from archwith.model.mapping import (
    IDENTITY,
    Converter,
    ConverterKind,
    FieldMappingTable,
    FieldSpec,
    Getter,
    VariantSpec,
)

# ###############
# Public Interface
# ###############


def build(decl: MirrorDecl, directives: DirectiveModel) -> FieldMappingTable:
    """Turn a mirror declaration and its parsed directives into a Field Mapping Table.

    Args:
        decl: The mirror type declaration (name, shape, field types).
        directives: The directives parsed from *decl*, keyed by field name.

    Returns:
        An unvalidated :class:`FieldMappingTable` with one FieldSpec per
        declared field, in declaration order; for a variants type, one
        VariantSpec per variant holding its fields.
    """
    variants = {
        variant.name: VariantSpec(
            name=variant.name,
            shape=variant.shape,
            fields=_build_fields(variant.fields, directives.variants.get(variant.name, {})),
        )
        for variant in decl.variants
    }

    return FieldMappingTable(
        type_name=decl.name,
        shape=decl.shape,
        remote_types=directives.type.remote_types,
        fields=_build_fields(decl.fields, directives.fields),
        variants=variants,
    )


def infer_converter(field_decl: FieldDecl, directives: FieldDirectives) -> Converter:
    """Select the converter for one field according to the inference rules."""
    if directives.via is not None:
        return Converter(kind=ConverterKind.VIA, chain=directives.via)
    if directives.from_type is not None:
        return Converter(kind=ConverterKind.SELF, chain=(field_decl.mirror_type,))
    if directives.wrappers:
        return Converter(kind=ConverterKind.WITH, chain=directives.wrappers)
    return IDENTITY


# ################
# Implementation
# ################


def _build_fields(decls: list[FieldDecl], directives: dict[str, FieldDirectives]) -> dict[str, FieldSpec]:
    return {
        field_decl.name: _build_field(index, field_decl, directives.get(field_decl.name, FieldDirectives()))
        for index, field_decl in enumerate(decls)
    }


def _build_field(index: int, field_decl: FieldDecl, directives: FieldDirectives) -> FieldSpec:
    getter = None
    if directives.getter is not None:
        getter = Getter(path=directives.getter, owned=directives.getter_owned)

    return FieldSpec(
        name=field_decl.name,
        index=index,
        mirror_type=field_decl.mirror_type,
        from_type=directives.from_type,
        via=directives.via,
        getter=getter,
        getter_owned=directives.getter_owned,
        converter=infer_converter(field_decl, directives),
    )
