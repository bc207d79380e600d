# Copyright 2026 archwith Contributors
# SPDX-License-Identifier: Apache-2.0

"""Validation of Field Mapping Tables.

Checks a freshly built table for completeness and internal consistency and,
when it passes, returns the finalised table with every field annotated as
reconstructable or not. The checks are local to one mirror type; the only
outside knowledge is the optional map of other mirror types' remote types,
used for a best-effort converter compatibility check.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from archwith.model.diagnostics import Diagnostic, DiagnosticKind
from archwith.model.mapping import FieldMappingTable, FieldSpec
from archwith.model.paths import TypePath

# ###############
# Public Interface
# ###############


@dataclass
class ValidationResult:
    """Result of validating one Field Mapping Table.

    Attributes:
        table: The finalised table, or None if any error was found.
        errors: Fatal problems; emission is skipped for this type.
        notes: Non-fatal remarks, such as a type that cannot be deserialized automatically.
    """

    table: FieldMappingTable | None = None
    errors: list[Diagnostic] = field(default_factory=list)
    notes: list[Diagnostic] = field(default_factory=list)

    @property
    def has_errors(self) -> bool:
        """Return True if any fatal diagnostic was found."""
        return len(self.errors) > 0


def validate(
    table: FieldMappingTable,
    *,
    known_mirrors: dict[str, tuple[TypePath, ...]] | None = None,
) -> ValidationResult:
    """Validate a Field Mapping Table and annotate its fields.

    Checks performed:

    1. **MissingRemoteType**: the type declares no remote type.
    2. **DuplicateRemoteType**: the same remote type is listed twice.
    3. **GetterOwnedWithoutGetter**: a field sets ``getter_owned`` but has no getter.
    4. **AmbiguousConversion** (best effort): a field's single converter is
       a mirror type from *known_mirrors* that does not stand in for the
       field's source type, or an identity-converted field is typed as a
       mirror type. Other mismatches surface later as errors in the
       generated code.

    When no error is found, every field is marked ``reconstructable`` iff it
    has no getter, and a ``NotReconstructable`` note is added if any field
    is not.

    Args:
        table: The table produced by the IR builder.
        known_mirrors: Mapping from mirror type name to its declared remote
            types, for mirror types compiled in the same invocation.

    Returns:
        A :class:`ValidationResult` carrying either the finalised table or the errors.
    """
    mirrors = known_mirrors or {}
    errors: list[Diagnostic] = []

    errors.extend(_check_remote_types(table))
    for label, spec in table.labelled_fields():
        errors.extend(_check_getter(table.type_name, label, spec))
        errors.extend(_check_conversion(table.type_name, label, spec, mirrors))

    if errors:
        return ValidationResult(errors=errors)

    variants = {
        name: variant.model_copy(update={"fields": _annotate(variant.fields)})
        for name, variant in table.variants.items()
    }
    finalised = table.model_copy(update={"fields": _annotate(table.fields), "variants": variants, "validated": True})

    notes: list[Diagnostic] = []
    if not finalised.fully_reconstructable:
        names = ", ".join(f"'{label}'" for label, spec in finalised.labelled_fields() if not spec.reconstructable)
        notes.append(
            Diagnostic(
                kind=DiagnosticKind.NOT_RECONSTRUCTABLE,
                message=(
                    f"fields {names} are read through a getter; no deserializer is generated, "
                    f"register one manually with {table.type_name}.register_deserializer()"
                ),
                type_name=table.type_name,
            )
        )
    return ValidationResult(table=finalised, notes=notes)


# ################
# Implementation
# ################


def _check_remote_types(table: FieldMappingTable) -> list[Diagnostic]:
    if not table.remote_types:
        return [
            Diagnostic(
                kind=DiagnosticKind.MISSING_REMOTE_TYPE,
                message="requires a type-level `from(RemoteType)` directive",
                type_name=table.type_name,
            )
        ]

    errors: list[Diagnostic] = []
    seen: set[str] = set()
    for remote in table.remote_types:
        ref = remote.reference()
        if ref in seen:
            errors.append(
                Diagnostic(
                    kind=DiagnosticKind.DUPLICATE_REMOTE_TYPE,
                    message=f"remote type '{remote}' is listed more than once",
                    type_name=table.type_name,
                )
            )
        seen.add(ref)
    return errors


def _annotate(fields: dict[str, FieldSpec]) -> dict[str, FieldSpec]:
    return {name: spec.model_copy(update={"reconstructable": spec.getter is None}) for name, spec in fields.items()}


def _check_getter(type_name: str, label: str, spec: FieldSpec) -> list[Diagnostic]:
    if spec.getter_owned and spec.getter is None:
        return [
            Diagnostic(
                kind=DiagnosticKind.GETTER_OWNED_WITHOUT_GETTER,
                message="`getter_owned` requires `getter = \"path\"`",
                type_name=type_name,
                field_name=label,
            )
        ]
    return []


def _mirror_name(path: TypePath, mirrors: dict[str, tuple[TypePath, ...]]) -> str | None:
    """Return the mirror type name *path* refers to, if it is a known mirror type."""
    if path.module is None and not path.args and path.qualname in mirrors:
        return path.qualname
    return None


def _check_conversion(
    type_name: str,
    label: str,
    spec: FieldSpec,
    mirrors: dict[str, tuple[TypePath, ...]],
) -> list[Diagnostic]:
    converter = spec.converter

    if converter.is_identity:
        mirror = _mirror_name(spec.mirror_type, mirrors)
        if mirror is None:
            return []
        return [
            Diagnostic(
                kind=DiagnosticKind.AMBIGUOUS_CONVERSION,
                message=(
                    f"field type '{mirror}' is a mirror type; declare `from(...)` to select "
                    "which of its remote types the field holds"
                ),
                type_name=type_name,
                field_name=label,
            )
        ]

    # Outer converters of a longer chain receive wrapped values; nothing to compare.
    if len(converter.chain) != 1:
        return []

    mirror = _mirror_name(converter.chain[0], mirrors)
    if mirror is None:
        return []

    accepted = {remote.reference() for remote in mirrors[mirror]}
    if spec.source_type.reference() in accepted:
        return []
    listed = ", ".join(f"'{remote}'" for remote in mirrors[mirror]) or "nothing"
    return [
        Diagnostic(
            kind=DiagnosticKind.AMBIGUOUS_CONVERSION,
            message=f"converter '{mirror}' stands in for {listed}, not for '{spec.source_type}'",
            type_name=type_name,
            field_name=label,
        )
    ]
