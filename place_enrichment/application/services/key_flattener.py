"""
Aplanado de registros anidados del proveedor en claves dot-path.

Política de arrays (fija para todo el despliegue): un array es UNA hoja
opaca de tipo json ("photos", "types", ...). No se expanden índices
("photos[0]"); el schema registry indexa por dot-path exacto.

Se mantiene libre de I/O para poder testearlo fácilmente.
"""

from __future__ import annotations

from typing import Any, Iterator, Mapping


def flatten_record(record: Mapping[str, Any], prefix: str = "") -> dict[str, Any]:
    """
    Aplana un registro a {dot_path: hoja}.

    - Objetos: recursión con "padre.hijo"
    - Arrays: una hoja (si no están vacíos)
    - None: no produce clave
    - Objetos y arrays vacíos: no producen entradas
    """
    flat: dict[str, Any] = {}
    for key, value in record.items():
        full_key = f"{prefix}.{key}" if prefix else str(key)

        if value is None:
            continue
        if isinstance(value, Mapping):
            flat.update(flatten_record(value, full_key))
            continue
        if isinstance(value, (list, tuple)) and not value:
            continue

        flat[full_key] = value
    return flat


def iter_keys(record: Mapping[str, Any]) -> Iterator[str]:
    """Itera solo las claves aplanadas, en orden de aparición."""
    yield from flatten_record(record)


def root_field(key: str) -> str:
    """Primer segmento de un dot-path ("geometry.location.lat" -> "geometry")."""
    return key.split(".", 1)[0]
