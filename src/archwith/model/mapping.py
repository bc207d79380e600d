# Copyright 2026 archwith Contributors
# SPDX-License-Identifier: Apache-2.0

"""The Field Mapping Table: the typed intermediate representation of one mirror type."""

from __future__ import annotations

from collections.abc import Iterator
from enum import Enum

from pydantic import BaseModel, ConfigDict
from pydantic import Field as _Field

from archwith.model.directives import Shape
from archwith.model.paths import TypePath

# ###############
# Public Interface
# ###############


class ConverterKind(Enum):
    """Which inference rule produced a field's converter."""

    IDENTITY = "identity"
    SELF = "self"
    VIA = "via"
    WITH = "with"


class Converter(BaseModel):
    """The converter chain applied to one field, outermost converter first.

    An identity converter has an empty chain.
    """

    model_config = ConfigDict(frozen=True)

    kind: ConverterKind
    chain: tuple[TypePath, ...] = ()

    @property
    def is_identity(self) -> bool:
        return not self.chain

    @property
    def outer(self) -> TypePath | None:
        return self.chain[0] if self.chain else None


IDENTITY = Converter(kind=ConverterKind.IDENTITY)


class Getter(BaseModel):
    """An explicit accessor for a field of the remote type.

    Attributes:
        path: Function called with the remote instance.
        owned: The function consumes the instance, so it receives a copy.
    """

    model_config = ConfigDict(frozen=True)

    path: TypePath
    owned: bool = False


class FieldSpec(BaseModel):
    """The correspondence rule for one field of a mirror type.

    Attributes:
        name: Field name, identical in the mirror and the remote type.
        index: Position of the field in declaration order.
        mirror_type: Declared type of the field in the mirror type.
        from_type: Type of the field in the remote type, if it differs.
        via: Explicit converter chain, if declared.
        getter: Explicit accessor, if declared.
        getter_owned: Raw ``getter_owned`` flag as declared.
        converter: The converter selected by the inference rules.
        reconstructable: Set by validation; True iff no getter is used.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    index: int
    mirror_type: TypePath
    from_type: TypePath | None = None
    via: tuple[TypePath, ...] | None = None
    getter: Getter | None = None
    getter_owned: bool = False
    converter: Converter = IDENTITY
    reconstructable: bool = False

    @property
    def source_type(self) -> TypePath:
        """Return the type of the value read from the remote instance."""
        return self.from_type if self.from_type is not None else self.mirror_type


class VariantSpec(BaseModel):
    """The field rules of one variant of a variants mirror type."""

    model_config = ConfigDict(frozen=True)

    name: str
    shape: Shape = Shape.NAMED
    fields: dict[str, FieldSpec] = _Field(default_factory=dict)

    def variant_path(self, remote: TypePath) -> TypePath:
        """Return the variant class of *remote*: the attribute named after the variant, without subscripts."""
        return remote.model_copy(update={"qualname": f"{remote.qualname}.{self.name}", "args": ()})


class FieldMappingTable(BaseModel):
    """All field rules of one mirror type, in declaration order.

    Attributes:
        type_name: Name of the mirror type.
        shape: How remote instances are read and constructed.
        remote_types: Remote types the mirror stands in for, in declaration order.
        fields: Field rules keyed by name; empty for a variants type.
        variants: Variant rules keyed by variant name; only for a variants type.
        validated: True once the validator has accepted and annotated the table.
    """

    model_config = ConfigDict(frozen=True)

    type_name: str
    shape: Shape = Shape.NAMED
    remote_types: tuple[TypePath, ...] = ()
    fields: dict[str, FieldSpec] = _Field(default_factory=dict)
    variants: dict[str, VariantSpec] = _Field(default_factory=dict)
    validated: bool = False

    def labelled_fields(self) -> Iterator[tuple[str, FieldSpec]]:
        """Yield every field rule with its label, ``name`` or ``Variant.name`` inside a variant."""
        for name, spec in self.fields.items():
            yield name, spec
        for variant in self.variants.values():
            for name, spec in variant.fields.items():
                yield f"{variant.name}.{name}", spec

    @property
    def fully_reconstructable(self) -> bool:
        """Return True iff every field can be restored without a getter."""
        return all(spec.reconstructable for _, spec in self.labelled_fields())
