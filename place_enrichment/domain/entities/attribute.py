"""
Entidad de dominio: AttributeDefinition (definición de atributo).
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import FrozenSet, Optional

from place_enrichment.shared.constants.attribute_constants import AttributeKind, UpdateTier


@dataclass(frozen=True)
class AttributeDefinition:
    """
    Fila de schema que describe un campo descubierto del proveedor.

    - key: dot-path único e inmutable (p.ej. "geometry.location.lat")
    - kind: tipo de almacenamiento; None si input_type es desconocido
    - raw_kind: input_type tal como está en base de datos
    - category_scope: categorías a las que aplica; vacío = todas

    `is_active` y `category_scope` los cura un proceso externo;
    el pipeline solo los lee.
    """

    attribute_id: int
    key: str
    kind: Optional[AttributeKind]
    raw_kind: str
    multilingual: bool = False
    is_active: bool = False
    update_tier: UpdateTier = UpdateTier.EVERY_RUN
    category_scope: FrozenSet[int] = field(default_factory=frozenset)
