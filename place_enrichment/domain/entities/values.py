"""
Valores tipados de atributos.

Un valor almacenado ocupa exactamente un slot (value_text, value_number,
value_bool, value_json, value_option). En código se representa como un
TaggedValue: una unión discriminada por `kind`, de la que se derivan las
columnas de la fila. Nunca se construyen los slots a mano.
"""
from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Optional

from place_enrichment.shared.constants.attribute_constants import AttributeKind, VALUE_SLOTS


def _is_finite(number) -> bool:
    """False para NaN, infinito o enteros fuera del rango de float."""
    try:
        return math.isfinite(number)
    except OverflowError:
        return False


@dataclass(frozen=True)
class TaggedValue:
    """Valor listo para persistir, etiquetado con su tipo de almacenamiento."""

    kind: AttributeKind
    value: Any

    def __post_init__(self):
        """Valida que el payload corresponda al tipo."""
        if self.value is None:
            raise ValueError("Un TaggedValue no puede tener valor None")

        if self.kind in (AttributeKind.TEXT, AttributeKind.OPTION):
            valid = isinstance(self.value, str)
        elif self.kind is AttributeKind.NUMBER:
            valid = (
                isinstance(self.value, (int, float))
                and not isinstance(self.value, bool)
                and _is_finite(self.value)
            )
        elif self.kind is AttributeKind.BOOLEAN:
            valid = isinstance(self.value, bool)
        elif self.kind is AttributeKind.JSON:
            valid = isinstance(self.value, (dict, list))
        else:
            valid = False

        if not valid:
            raise ValueError(
                f"Valor {type(self.value).__name__} no válido para kind '{self.kind.value}'"
            )

    @property
    def slot(self) -> str:
        """Columna que ocupa este valor."""
        return VALUE_SLOTS[self.kind]

    def to_columns(self) -> dict[str, Any]:
        """
        Todas las columnas de valor: el slot propio poblado, el resto en NULL.
        """
        columns = {column: None for column in VALUE_SLOTS.values()}
        columns[self.slot] = self.value
        return columns

    @classmethod
    def from_columns(cls, row: dict[str, Any]) -> Optional["TaggedValue"]:
        """Reconstruye el valor desde una fila; None si no hay slot poblado."""
        for kind, column in VALUE_SLOTS.items():
            value = row.get(column)
            if value is not None:
                return cls(kind=kind, value=value)
        return None


@dataclass(frozen=True)
class EntityValue:
    """Valor de un atributo para un lugar en un idioma."""

    location_id: int
    attribute_id: int
    language_code: str
    value: TaggedValue
    updated_at: datetime
