# Copyright 2026 archwith Contributors
# SPDX-License-Identifier: Apache-2.0

"""Declarations of mirror types and the directives attached to them."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict
from pydantic import Field as _Field

from archwith.model.paths import TypePath

# ###############
# Public Interface
# ###############


class Shape(Enum):
    """How the fields of a remote type are read and how it is constructed.

    ``VARIANTS`` describes a remote type with several variant classes, each
    with its own named, positional or unit fields.
    """

    NAMED = "named"
    POSITIONAL = "positional"
    UNIT = "unit"
    VARIANTS = "variants"


class FieldDecl(BaseModel):
    """One field of a mirror type as declared, before its directives are parsed."""

    name: str
    mirror_type: TypePath
    directives: list[str] = _Field(default_factory=list)


class VariantDecl(BaseModel):
    """One variant of a variants mirror type.

    The remote variant class is the attribute of the same name on each
    remote type, e.g. ``remote.Event.Moved`` for variant ``Moved``.
    """

    name: str
    shape: Shape = Shape.NAMED
    fields: list[FieldDecl] = _Field(default_factory=list)


class MirrorDecl(BaseModel):
    """A mirror type as declared: its name, shape, raw directives, and fields or variants."""

    name: str
    shape: Shape = Shape.NAMED
    directives: list[str] = _Field(default_factory=list)
    fields: list[FieldDecl] = _Field(default_factory=list)
    variants: list[VariantDecl] = _Field(default_factory=list)


class TypeDirectives(BaseModel):
    """Parsed type-level directives."""

    model_config = ConfigDict(frozen=True)

    remote_types: tuple[TypePath, ...] = ()


class FieldDirectives(BaseModel):
    """Parsed field-level directives.

    Attributes:
        from_type: The field's type in the remote type, if it differs.
        via: Converter chain, outermost first.
        getter: Function used to read the field from a remote instance.
        getter_owned: The getter takes the remote instance by value.
        wrappers: Consuming-side ``with(...)`` converters, outermost first.
    """

    model_config = ConfigDict(frozen=True)

    from_type: TypePath | None = None
    via: tuple[TypePath, ...] | None = None
    getter: TypePath | None = None
    getter_owned: bool = False
    wrappers: tuple[TypePath, ...] = ()


class DirectiveModel(BaseModel):
    """All parsed directives of one mirror type, keyed by field name in declaration order.

    Fields of a variants type are keyed by variant name first.
    """

    model_config = ConfigDict(frozen=True)

    type: TypeDirectives = _Field(default_factory=TypeDirectives)
    fields: dict[str, FieldDirectives] = _Field(default_factory=dict)
    variants: dict[str, dict[str, FieldDirectives]] = _Field(default_factory=dict)
