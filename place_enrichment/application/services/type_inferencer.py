"""
Inferencia del tipo de almacenamiento de una hoja del registro.
"""

from __future__ import annotations

from typing import Any, Mapping

from place_enrichment.shared.constants.attribute_constants import AttributeKind


_MISSING = object()


def resolve_path(record: Any, key: str, default: Any = None) -> Any:
    """
    Resuelve un dot-path contra el registro.
    Retorna `default` si algún segmento no existe o no es un objeto.
    """
    value = record
    for part in key.split("."):
        if isinstance(value, Mapping) and part in value:
            value = value[part]
        else:
            return default
    return value


def infer_kind(record: Mapping[str, Any], key: str) -> AttributeKind:
    """
    Clasifica la hoja en `key`:
    text (None/str/desconocido), boolean, number o json (objeto/array).
    """
    value = resolve_path(record, key, _MISSING)

    if value is _MISSING or value is None:
        return AttributeKind.TEXT
    # bool es subclase de int: se evalúa antes que number
    if isinstance(value, bool):
        return AttributeKind.BOOLEAN
    if isinstance(value, (int, float)):
        return AttributeKind.NUMBER
    if isinstance(value, (Mapping, list, tuple)):
        return AttributeKind.JSON
    return AttributeKind.TEXT
