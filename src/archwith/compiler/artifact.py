# Copyright 2026 archwith Contributors
# SPDX-License-Identifier: Apache-2.0

"""Serialization and deserialization of validated Field Mapping Tables.

Tables are stored as compact JSON for inspection and for comparing the
compiler's decisions across runs. The format is versioned so future schema
changes can be detected.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from archwith.compiler.directives import parse_type_path
from archwith.model.directives import Shape
from archwith.model.mapping import Converter, ConverterKind, FieldMappingTable, FieldSpec, Getter, VariantSpec
from archwith.model.paths import TypePath

# ###############
# Public Interface
# ###############

ARTIFACT_FORMAT_VERSION = "1"
ARTIFACT_SUFFIX = ".archwith.json"


def serialize(tables: list[FieldMappingTable]) -> str:
    """Serialize Field Mapping Tables to a compact JSON string."""
    return json.dumps(
        {"v": ARTIFACT_FORMAT_VERSION, "tables": [_table_to_dict(t) for t in tables]},
        separators=(",", ":"),
    )


def deserialize(data: str) -> list[FieldMappingTable]:
    """Deserialize Field Mapping Tables from a JSON string.

    Args:
        data: JSON string produced by :func:`serialize`.

    Returns:
        The reconstructed tables, in their original order.

    Raises:
        ValueError: If the artifact format version is not recognised.
    """
    obj = json.loads(data)
    version = obj.get("v")
    if version != ARTIFACT_FORMAT_VERSION:
        raise ValueError(f"Unsupported artifact format version: {version!r}")
    return [_table_from_dict(t) for t in obj["tables"]]


def write_artifact(tables: list[FieldMappingTable], path: Path) -> None:
    """Write a tables artifact to *path*, creating parent directories as needed."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(serialize(tables), encoding="utf-8")


def read_artifact(path: Path) -> list[FieldMappingTable]:
    """Read and deserialize a tables artifact from *path*."""
    return deserialize(path.read_text(encoding="utf-8"))


# ################
# Implementation
# ################


def _path_to_str(path: TypePath | None) -> str | None:
    return None if path is None else str(path)


def _path_from_str(text: str | None) -> TypePath | None:
    return None if text is None else parse_type_path(text)


def _table_to_dict(table: FieldMappingTable) -> dict[str, Any]:
    d: dict[str, Any] = {
        "name": table.type_name,
        "shape": table.shape.value,
        "remote_types": [str(r) for r in table.remote_types],
        "validated": table.validated,
        "fields": [_field_to_dict(f) for f in table.fields.values()],
    }
    if table.variants:
        d["variants"] = [
            {"name": v.name, "shape": v.shape.value, "fields": [_field_to_dict(f) for f in v.fields.values()]}
            for v in table.variants.values()
        ]
    return d


def _field_to_dict(spec: FieldSpec) -> dict[str, Any]:
    d: dict[str, Any] = {
        "name": spec.name,
        "index": spec.index,
        "mirror_type": str(spec.mirror_type),
        "converter": {"kind": spec.converter.kind.value, "chain": [str(c) for c in spec.converter.chain]},
        "reconstructable": spec.reconstructable,
    }
    if spec.from_type is not None:
        d["from"] = _path_to_str(spec.from_type)
    if spec.via is not None:
        d["via"] = [str(v) for v in spec.via]
    if spec.getter is not None:
        d["getter"] = {"path": str(spec.getter.path), "owned": spec.getter.owned}
    if spec.getter_owned:
        d["getter_owned"] = True
    return d


def _table_from_dict(d: dict[str, Any]) -> FieldMappingTable:
    return FieldMappingTable(
        type_name=d["name"],
        shape=Shape(d.get("shape", Shape.NAMED.value)),
        remote_types=tuple(parse_type_path(r) for r in d.get("remote_types", [])),
        fields=_fields_from_list(d.get("fields", [])),
        variants={v["name"]: _variant_from_dict(v) for v in d.get("variants", [])},
        validated=d.get("validated", False),
    )


def _variant_from_dict(d: dict[str, Any]) -> VariantSpec:
    return VariantSpec(name=d["name"], shape=Shape(d["shape"]), fields=_fields_from_list(d.get("fields", [])))


def _fields_from_list(items: list[dict[str, Any]]) -> dict[str, FieldSpec]:
    fields = [_field_from_dict(f) for f in items]
    return {f.name: f for f in fields}


def _field_from_dict(d: dict[str, Any]) -> FieldSpec:
    converter = d["converter"]
    getter = d.get("getter")
    via = d.get("via")
    return FieldSpec(
        name=d["name"],
        index=d["index"],
        mirror_type=parse_type_path(d["mirror_type"]),
        from_type=_path_from_str(d.get("from")),
        via=None if via is None else tuple(parse_type_path(v) for v in via),
        getter=None if getter is None else Getter(path=parse_type_path(getter["path"]), owned=getter["owned"]),
        getter_owned=d.get("getter_owned", False),
        converter=Converter(
            kind=ConverterKind(converter["kind"]),
            chain=tuple(parse_type_path(c) for c in converter["chain"]),
        ),
        reconstructable=d.get("reconstructable", False),
    )
