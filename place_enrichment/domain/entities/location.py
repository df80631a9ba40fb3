"""
Entidad de dominio: Location (lugar enriquecido).
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class Location:
    """Lugar ya importado, identificado por su Google Place ID."""

    id: int
    google_place_id: str
    display_name: Optional[str] = None
    category_id: Optional[int] = None
