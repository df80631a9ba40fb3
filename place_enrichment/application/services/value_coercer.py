"""
Conversión de un valor (ya traducido) al TaggedValue que exige su atributo.

Reglas por tipo:
- text / option: str tal cual; el resto se serializa a JSON
- number: int/float o string numérico; si no parsea -> CoercionException
- boolean: bool tal cual; solo el string "true" es True
- json: objeto/array tal cual; un string se intenta parsear. Si no resulta
  en objeto/array se guarda como text (fallback entre tipos)
- tipo desconocido -> UnknownAttributeKindException
"""

from __future__ import annotations

import json
import math
from dataclasses import dataclass
from typing import Any, Optional

from loguru import logger

from place_enrichment.domain.entities.values import TaggedValue
from place_enrichment.shared.constants.attribute_constants import AttributeKind
from place_enrichment.shared.exceptions.domain import (
    CoercionException,
    UnknownAttributeKindException,
)


@dataclass(frozen=True)
class CoercedValue:
    """
    Resultado de la conversión.

    fallback=True indica que el valor se guardó con otro tipo que el
    del atributo (json que no parsea -> text).
    """

    tagged: TaggedValue
    fallback: bool = False


def stringify(value: Any) -> str:
    """str tal cual; cualquier otro valor como JSON."""
    if isinstance(value, str):
        return value
    return json.dumps(value, ensure_ascii=False)


def _to_number(value: Any) -> float | int:
    if isinstance(value, bool):
        raise CoercionException(AttributeKind.NUMBER.value, value)
    if isinstance(value, (int, float)):
        number = value
    elif isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError as e:
            raise CoercionException(AttributeKind.NUMBER.value, value) from e
    else:
        raise CoercionException(AttributeKind.NUMBER.value, value)

    try:
        finite = math.isfinite(number)
    except OverflowError as e:
        # int más grande que el rango de float
        raise CoercionException(AttributeKind.NUMBER.value, value) from e
    if not finite:
        raise CoercionException(AttributeKind.NUMBER.value, value)
    return number


def _to_json(value: Any) -> Optional[Any]:
    """Objeto/array resultante, o None si el valor no es json estructurado."""
    if isinstance(value, (dict, list)):
        return value
    if isinstance(value, tuple):
        return list(value)
    if isinstance(value, str):
        try:
            parsed = json.loads(value.strip())
        except ValueError:
            return None
        if isinstance(parsed, (dict, list)):
            return parsed
    return None


def coerce_value(value: Any, kind: Optional[AttributeKind], *, key: str = None) -> CoercedValue:
    """
    Convierte `value` al tipo `kind`.

    Raises:
        UnknownAttributeKindException: kind None (input_type desconocido)
        CoercionException: number que no parsea
    """
    if kind is None:
        raise UnknownAttributeKindException(kind, key)

    if kind is AttributeKind.TEXT:
        return CoercedValue(TaggedValue(AttributeKind.TEXT, stringify(value)))

    if kind is AttributeKind.OPTION:
        return CoercedValue(TaggedValue(AttributeKind.OPTION, stringify(value)))

    if kind is AttributeKind.NUMBER:
        return CoercedValue(TaggedValue(AttributeKind.NUMBER, _to_number(value)))

    if kind is AttributeKind.BOOLEAN:
        flag = value if isinstance(value, bool) else value == "true"
        return CoercedValue(TaggedValue(AttributeKind.BOOLEAN, flag))

    if kind is AttributeKind.JSON:
        parsed = _to_json(value)
        if parsed is not None:
            return CoercedValue(TaggedValue(AttributeKind.JSON, parsed))
        logger.warning(
            f"Valor no es JSON estructurado para '{key or '?'}': se guarda como text"
        )
        return CoercedValue(TaggedValue(AttributeKind.TEXT, stringify(value)), fallback=True)

    raise UnknownAttributeKindException(kind, key)
