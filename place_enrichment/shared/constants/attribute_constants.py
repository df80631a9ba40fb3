"""
Constantes relacionadas con definiciones de atributos.
"""
from enum import Enum
from typing import Optional


class AttributeKind(str, Enum):
    """Tipos de almacenamiento (slot) de un valor de atributo."""
    TEXT = "text"
    NUMBER = "number"
    BOOLEAN = "boolean"
    JSON = "json"
    OPTION = "option"

    @classmethod
    def from_raw(cls, raw: Optional[str]) -> Optional["AttributeKind"]:
        """
        Resuelve el input_type guardado en base de datos.
        Retorna None si el valor no es un tipo conocido.
        """
        if raw is None:
            return None
        normalized = str(raw).strip().lower()
        normalized = _KIND_ALIASES.get(normalized, normalized)
        try:
            return cls(normalized)
        except ValueError:
            return None


# Alias heredados de definiciones creadas a mano
_KIND_ALIASES = {
    "bool": "boolean",
}


class UpdateTier(str, Enum):
    """Cadencia de refresco de un atributo."""
    EVERY_RUN = "every_run"
    WEEKLY = "weekly"
    MONTHLY = "monthly"


# Columna de location_values que ocupa cada tipo
VALUE_SLOTS = {
    AttributeKind.TEXT: "value_text",
    AttributeKind.NUMBER: "value_number",
    AttributeKind.BOOLEAN: "value_bool",
    AttributeKind.JSON: "value_json",
    AttributeKind.OPTION: "value_option",
}
