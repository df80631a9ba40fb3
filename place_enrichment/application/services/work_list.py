"""
Lista de trabajo: lugares a procesar en una corrida.

El archivo es un array JSON cuyas entradas son un Place ID (string)
o un objeto {"placeId": "...", "preferredName": "..."}.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

from loguru import logger


@dataclass(frozen=True)
class WorkItem:
    """Un lugar a procesar, con nombre preferido opcional."""

    place_id: str
    preferred_name: Optional[str] = None


def parse_work_item(entry: Any) -> Optional[WorkItem]:
    """Convierte una entrada del archivo; None si no trae Place ID."""
    if isinstance(entry, str):
        place_id = entry.strip()
        return WorkItem(place_id=place_id) if place_id else None
    if isinstance(entry, dict):
        place_id = str(entry.get("placeId") or entry.get("place_id") or "").strip()
        if not place_id:
            return None
        preferred = entry.get("preferredName") or entry.get("preferred_name") or None
        return WorkItem(place_id=place_id, preferred_name=preferred)
    return None


def load_work_items(path: str | Path) -> list[WorkItem]:
    """
    Lee la lista de trabajo. Un archivo ilegible o inválido retorna []
    (la corrida termina sin trabajo, no falla).
    """
    path = Path(path)
    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        logger.error(f"Error al leer la lista de trabajo {path}: {e}")
        return []

    if not isinstance(raw, list):
        logger.error(f"La lista de trabajo {path} debe ser un array JSON")
        return []

    items: list[WorkItem] = []
    for entry in raw:
        item = parse_work_item(entry)
        if item is None:
            logger.warning(f"Entrada sin Place ID ignorada: {entry!r}")
            continue
        items.append(item)
    return items
