# Copyright 2026 archwith Contributors
# SPDX-License-Identifier: Apache-2.0

"""Diagnostics reported while compiling mirror types."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

# ###############
# Public Interface
# ###############


class DiagnosticKind(Enum):
    """Every kind of diagnostic the compiler can report."""

    SYNTAX = "Syntax"
    MISSING_REMOTE_TYPE = "MissingRemoteType"
    GETTER_OWNED_WITHOUT_GETTER = "GetterOwnedWithoutGetter"
    AMBIGUOUS_CONVERSION = "AmbiguousConversion"
    DUPLICATE_REMOTE_TYPE = "DuplicateRemoteType"
    NOT_RECONSTRUCTABLE = "NotReconstructable"


@dataclass(frozen=True)
class Diagnostic:
    """A problem or note attached to a mirror type, and optionally one of its fields.

    Attributes:
        kind: What was detected.
        message: Human-readable description.
        type_name: Name of the mirror type the diagnostic belongs to.
        field_name: Name of the offending field, if the diagnostic is field-scoped.
    """

    kind: DiagnosticKind
    message: str
    type_name: str
    field_name: str | None = None

    @property
    def is_error(self) -> bool:
        """Return True unless this diagnostic is only a note."""
        return self.kind is not DiagnosticKind.NOT_RECONSTRUCTABLE

    @property
    def location(self) -> str:
        """Return ``type 'T'`` or ``type 'T', field 'f'``."""
        if self.field_name is None:
            return f"type '{self.type_name}'"
        return f"type '{self.type_name}', field '{self.field_name}'"

    def __str__(self) -> str:
        return f"{self.location}: {self.kind.value}: {self.message}"
