"""
Manifest encoding as a tagged-key document.

``TypeInfo`` is flattened: the variant tag sits under ``variant`` and the
struct/enum name, when there is one, under ``value``, next to the qualifier
flags. Pairs (struct fields, enum variants) become two-element lists.
"""

from __future__ import annotations

from typing import Any, Dict, List

import yaml

from manifest.models import (
    DeinitInfo,
    EnumInfo,
    FileInfo,
    FunctionInfo,
    ImportInfo,
    InitInfo,
    ParamInfo,
    PropertyInfo,
    StructInfo,
    TypeInfo,
    TypeVariant,
    VariantKind,
)


def type_info_to_dict(info: TypeInfo) -> Dict[str, Any]:
    payload: Dict[str, Any] = {"variant": info.variant.kind.value}
    if info.variant.name is not None:
        payload["value"] = info.variant.name
    payload.update(
        {
            "is_constant": info.is_constant,
            "is_nullable": info.is_nullable,
            "is_pointer": info.is_pointer,
            "tags": list(info.tags),
        }
    )
    return payload


def type_info_from_dict(payload: Dict[str, Any]) -> TypeInfo:
    try:
        kind = VariantKind(payload["variant"])
    except (KeyError, ValueError) as exc:
        raise ValueError(f"Invalid type variant in {payload!r}") from exc
    return TypeInfo(
        variant=TypeVariant(kind=kind, name=payload.get("value")),
        is_constant=bool(payload.get("is_constant", False)),
        is_nullable=bool(payload.get("is_nullable", False)),
        is_pointer=bool(payload.get("is_pointer", False)),
        tags=tuple(str(tag) for tag in payload.get("tags") or ()),
    )


def _params_to_list(params) -> List[Dict[str, Any]]:
    return [{"name": p.name, "type": type_info_to_dict(p.type)} for p in params]


def _params_from_list(items) -> tuple[ParamInfo, ...]:
    return tuple(
        ParamInfo(name=str(item["name"]), type=type_info_from_dict(item["type"]))
        for item in items or ()
    )


def _strings(items) -> tuple[str, ...]:
    return tuple(str(item) for item in items or ())


def file_info_to_dict(info: FileInfo) -> Dict[str, Any]:
    """Encode a manifest as plain dicts/lists, ready for YAML or JSON."""
    return {
        "name": info.name,
        "imports": [{"path": list(i.path)} for i in info.imports],
        "structs": [
            {
                "name": s.name,
                "is_public": s.is_public,
                "fields": [[name, type_info_to_dict(ty)] for name, ty in s.fields],
                "tags": list(s.tags),
            }
            for s in info.structs
        ],
        "inits": [
            {"name": i.name, "params": _params_to_list(i.params), "comments": list(i.comments)}
            for i in info.inits
        ],
        "deinits": [
            {"name": d.name, "params": _params_to_list(d.params), "comments": list(d.comments)}
            for d in info.deinits
        ],
        "enums": [
            {
                "name": e.name,
                "is_public": e.is_public,
                "variants": [[name, value] for name, value in e.variants],
                "tags": list(e.tags),
            }
            for e in info.enums
        ],
        "functions": [
            {
                "name": f.name,
                "is_public": f.is_public,
                "is_static": f.is_static,
                "params": _params_to_list(f.params),
                "return_type": type_info_to_dict(f.return_type),
                "comments": list(f.comments),
            }
            for f in info.functions
        ],
        "properties": [
            {
                "name": p.name,
                "is_public": p.is_public,
                "is_static": p.is_static,
                "return_type": type_info_to_dict(p.return_type),
                "comments": list(p.comments),
            }
            for p in info.properties
        ],
    }


def file_info_from_dict(payload: Dict[str, Any]) -> FileInfo:
    """Decode a manifest produced by ``file_info_to_dict``.

    Raises:
        ValueError: If the payload is not a manifest object.
    """
    if not isinstance(payload, dict) or "name" not in payload:
        raise ValueError("Manifest payload must be an object with a 'name'")

    return FileInfo(
        name=str(payload["name"]),
        imports=tuple(ImportInfo(path=_strings(i["path"])) for i in payload.get("imports") or ()),
        structs=tuple(
            StructInfo(
                name=str(s["name"]),
                is_public=bool(s["is_public"]),
                fields=tuple(
                    (str(name), type_info_from_dict(ty)) for name, ty in s.get("fields") or ()
                ),
                tags=_strings(s.get("tags")),
            )
            for s in payload.get("structs") or ()
        ),
        inits=tuple(
            InitInfo(
                name=str(i["name"]),
                params=_params_from_list(i.get("params")),
                comments=_strings(i.get("comments")),
            )
            for i in payload.get("inits") or ()
        ),
        deinits=tuple(
            DeinitInfo(
                name=str(d["name"]),
                params=_params_from_list(d.get("params")),
                comments=_strings(d.get("comments")),
            )
            for d in payload.get("deinits") or ()
        ),
        enums=tuple(
            EnumInfo(
                name=str(e["name"]),
                is_public=bool(e["is_public"]),
                variants=tuple(
                    (str(name), None if value is None else int(value))
                    for name, value in e.get("variants") or ()
                ),
                tags=_strings(e.get("tags")),
            )
            for e in payload.get("enums") or ()
        ),
        functions=tuple(
            FunctionInfo(
                name=str(f["name"]),
                is_public=bool(f["is_public"]),
                is_static=bool(f["is_static"]),
                return_type=type_info_from_dict(f["return_type"]),
                params=_params_from_list(f.get("params")),
                comments=_strings(f.get("comments")),
            )
            for f in payload.get("functions") or ()
        ),
        properties=tuple(
            PropertyInfo(
                name=str(p["name"]),
                is_public=bool(p["is_public"]),
                is_static=bool(p["is_static"]),
                return_type=type_info_from_dict(p["return_type"]),
                comments=_strings(p.get("comments")),
            )
            for p in payload.get("properties") or ()
        ),
    )


def dump_file_info(info: FileInfo) -> str:
    """Render a manifest as a YAML document."""
    return yaml.safe_dump(file_info_to_dict(info), sort_keys=False, allow_unicode=True)


def load_file_info(text: str) -> FileInfo:
    """Parse a YAML manifest document."""
    return file_info_from_dict(yaml.safe_load(text))
