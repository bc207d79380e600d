# Copyright 2026 archwith Contributors
# SPDX-License-Identifier: Apache-2.0

"""Data model and YAML parser for mirror declaration files.

A declaration file lists mirror types with their fields and the raw
directive text attached to them::

    output: adapters_generated.py
    types:
      - name: Example
        directives: from(remote.Remote)
        fields:
          - name: a
            type: int
          - name: b
            type: MirrorPath
            directives: from(pathlib.PurePath), via(AsString)

Directive text is kept raw here; it is parsed per type by the compiler so
that a malformed directive only affects its own type.
"""

from __future__ import annotations

import keyword
from dataclasses import dataclass, field
from pathlib import Path

import yaml

from archwith.compiler.codegen import RESERVED_NAMES, generated_names
from archwith.compiler.directives import DirectiveSyntaxError, parse_type_path
from archwith.model.directives import FieldDecl, MirrorDecl, Shape, VariantDecl

# ###############
# Public Interface
# ###############


class MirrorFileError(Exception):
    """Raised when a mirror declaration file is invalid or cannot be loaded."""


@dataclass
class MirrorFile:
    """The parsed contents of a mirror declaration file.

    Attributes:
        types: Mirror type declarations in file order.
        output: Output path for the generated module, relative to the file, if configured.
        source_label: Human-readable origin of the declarations (usually the file path).
    """

    types: list[MirrorDecl] = field(default_factory=list)
    output: str | None = None
    source_label: str = "<string>"


def load_mirror_file(path: Path) -> MirrorFile:
    """Load and parse a mirror declaration file.

    Args:
        path: Path to the YAML declaration file.

    Returns:
        A MirrorFile instance populated from the file.

    Raises:
        MirrorFileError: If the file cannot be read or its structure is invalid.
    """
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        raise MirrorFileError(f"Mirror declaration file not found: {path}") from None
    except OSError as exc:
        raise MirrorFileError(f"Cannot read mirror declaration file: {exc}") from exc

    return parse_mirror_file(text, source_label=str(path))


def parse_mirror_file(text: str, source_label: str = "<string>") -> MirrorFile:
    """Parse mirror declaration YAML text into a MirrorFile.

    Raises:
        MirrorFileError: If the YAML is invalid or required entries are missing.
    """
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise MirrorFileError(f"Invalid YAML in {source_label}: {exc}") from exc

    if not isinstance(data, dict):
        raise MirrorFileError(f"{source_label}: mirror declaration file must be a YAML mapping")

    unknown = sorted(set(data) - {"output", "types"})
    if unknown:
        raise MirrorFileError(f"{source_label}: unknown top-level key '{unknown[0]}'")

    output = None
    if "output" in data:
        output = _require_string(data, "output", source_label)

    raw_types = data.get("types")
    if not isinstance(raw_types, list):
        raise MirrorFileError(f"{source_label}: 'types' must be a list")

    types: list[MirrorDecl] = []
    claimed: dict[str, str] = {}
    for index, entry in enumerate(raw_types):
        location = f"{source_label}: types[{index}]"
        decl = _parse_type(entry, location)
        if decl.name in claimed and claimed[decl.name] == decl.name:
            raise MirrorFileError(f"{location}: duplicate mirror type '{decl.name}'")
        for name in generated_names(decl.name):
            if name in claimed:
                raise MirrorFileError(
                    f"{location}: mirror type '{decl.name}' would define '{name}', "
                    f"which mirror type '{claimed[name]}' already defines"
                )
            claimed[name] = decl.name
        types.append(decl)

    return MirrorFile(types=types, output=output, source_label=source_label)


# ################
# Implementation
# ################

_TYPE_KEYS = frozenset({"name", "shape", "directives", "fields", "variants"})
_VARIANT_KEYS = frozenset({"name", "shape", "fields"})
_FIELD_KEYS = frozenset({"name", "type", "directives"})


def _require_string(mapping: dict[str, object], key: str, location: str) -> str:
    """Extract a required string entry from a mapping, raising MirrorFileError if missing."""
    if key not in mapping:
        raise MirrorFileError(f"{location}: missing required field '{key}'")
    value = mapping[key]
    if not isinstance(value, str):
        raise MirrorFileError(f"{location}: '{key}' must be a string")
    return value


def _require_identifier(mapping: dict[str, object], key: str, location: str) -> str:
    value = _require_string(mapping, key, location)
    if not value.isidentifier() or keyword.iskeyword(value):
        raise MirrorFileError(f"{location}: '{key}' must be a Python identifier and not a keyword, got {value!r}")
    return value


def _directive_list(mapping: dict[str, object], location: str) -> list[str]:
    """Return the raw directive occurrences: a string, a list of strings, or nothing."""
    value = mapping.get("directives")
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, list) and all(isinstance(item, str) for item in value):
        return list(value)
    raise MirrorFileError(f"{location}: 'directives' must be a string or a list of strings")


def _check_keys(mapping: dict[str, object], allowed: frozenset[str], location: str) -> None:
    unknown = sorted(set(mapping) - allowed)
    if unknown:
        raise MirrorFileError(f"{location}: unknown key '{unknown[0]}'")


def _parse_type(entry: object, location: str) -> MirrorDecl:
    if not isinstance(entry, dict):
        raise MirrorFileError(f"{location} must be a YAML mapping")
    _check_keys(entry, _TYPE_KEYS, location)

    name = _require_identifier(entry, "name", location)
    location = f"{location} '{name}'"
    if name in RESERVED_NAMES:
        raise MirrorFileError(f"{location}: 'name' {name!r} is reserved in generated modules")

    shape = _shape(entry, location, tuple(Shape))
    variants = [
        _parse_variant(raw, f"{location}: variants[{index}]")
        for index, raw in enumerate(_optional_list(entry, "variants", location))
    ]
    return MirrorDecl(
        name=name,
        shape=shape,
        directives=_directive_list(entry, location),
        fields=_parse_fields(entry, shape, location),
        variants=variants,
    )


def _parse_variant(entry: object, location: str) -> VariantDecl:
    if not isinstance(entry, dict):
        raise MirrorFileError(f"{location} must be a YAML mapping")
    _check_keys(entry, _VARIANT_KEYS, location)

    name = _require_identifier(entry, "name", location)
    location = f"{location} '{name}'"
    shape = _shape(entry, location, (Shape.NAMED, Shape.POSITIONAL, Shape.UNIT))
    return VariantDecl(name=name, shape=shape, fields=_parse_fields(entry, shape, location))


def _shape(mapping: dict[str, object], location: str, allowed: tuple[Shape, ...]) -> Shape:
    """Return the optional 'shape' entry, named by default."""
    if "shape" not in mapping:
        return Shape.NAMED
    raw_shape = _require_string(mapping, "shape", location)
    for shape in allowed:
        if shape.value == raw_shape:
            return shape
    choices = ", ".join(s.value for s in allowed)
    raise MirrorFileError(f"{location}: 'shape' must be one of {choices}, got {raw_shape!r}")


def _optional_list(mapping: dict[str, object], key: str, location: str) -> list[object]:
    value = mapping.get(key)
    if value is None:
        return []
    if not isinstance(value, list):
        raise MirrorFileError(f"{location}: '{key}' must be a list")
    return value


def _parse_fields(mapping: dict[str, object], shape: Shape, location: str) -> list[FieldDecl]:
    return [
        _parse_field(raw, index, shape, f"{location}: fields[{index}]")
        for index, raw in enumerate(_optional_list(mapping, "fields", location))
    ]


def _parse_field(entry: object, index: int, shape: Shape, location: str) -> FieldDecl:
    if not isinstance(entry, dict):
        raise MirrorFileError(f"{location} must be a YAML mapping")
    _check_keys(entry, _FIELD_KEYS, location)

    if shape is Shape.POSITIONAL:
        if "name" in entry:
            raise MirrorFileError(f"{location}: positional fields are identified by position and take no 'name'")
        name = str(index)
    else:
        name = _require_identifier(entry, "name", location)

    raw_type = _require_string(entry, "type", location)
    try:
        mirror_type = parse_type_path(raw_type)
    except DirectiveSyntaxError as exc:
        raise MirrorFileError(f"{location}: invalid type {raw_type!r}: {exc}") from exc

    return FieldDecl(name=name, mirror_type=mirror_type, directives=_directive_list(entry, location))
