# Copyright 2026 archwith Contributors
# SPDX-License-Identifier: Apache-2.0

"""Data model for archwith: declarations, directives, the mapping table, and diagnostics."""

from archwith.model.diagnostics import Diagnostic, DiagnosticKind
from archwith.model.directives import (
    DirectiveModel,
    FieldDecl,
    FieldDirectives,
    MirrorDecl,
    Shape,
    TypeDirectives,
    VariantDecl,
)
from archwith.model.mapping import (
    IDENTITY,
    Converter,
    ConverterKind,
    FieldMappingTable,
    FieldSpec,
    Getter,
    VariantSpec,
)
from archwith.model.paths import TypePath, type_path

__all__ = [
    # Paths
    "TypePath",
    "type_path",
    # Declarations and directives
    "Shape",
    "FieldDecl",
    "VariantDecl",
    "MirrorDecl",
    "TypeDirectives",
    "FieldDirectives",
    "DirectiveModel",
    # Mapping table
    "ConverterKind",
    "Converter",
    "IDENTITY",
    "Getter",
    "FieldSpec",
    "VariantSpec",
    "FieldMappingTable",
    # Diagnostics
    "DiagnosticKind",
    "Diagnostic",
]
