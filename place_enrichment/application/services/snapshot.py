"""
Materialización de snapshots: sub-estructuras repetidas (fotos) que se
reemplazan completas en cada corrida, nunca se acumulan.

Algoritmo:
1. Deduplicar por id de referencia estable (gana la primera aparición)
2. Truncar a `max_items`
3. Proyectar cada item a una whitelist de sub-campos
4. Escribir la lista como valor COMPLETO de (lugar, atributo, "und")

Lista vacía tras 1-2: no se escribe (el snapshot previo queda intacto),
salvo que `clear_on_empty` esté activo, en cuyo caso se escribe [].
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Iterable, Mapping, Optional, Sequence

from loguru import logger

from place_enrichment.domain.entities.attribute import AttributeDefinition
from place_enrichment.domain.entities.values import TaggedValue
from place_enrichment.shared.constants.attribute_constants import AttributeKind


@dataclass(frozen=True)
class SnapshotSpec:
    """
    Define un atributo de colección repetida.

    - key: clave del atributo (p.ej. "photos")
    - reference_field: sub-campo con el id estable de cada item
    - fields: whitelist de sub-campos a guardar
    - item_key_prefix: prefijo de atributos indexados ("photo_" -> photo_1..n)
    """

    key: str
    reference_field: str
    fields: tuple[str, ...]
    item_key_prefix: Optional[str] = None

    def item_index(self, attribute_key: str) -> Optional[int]:
        """Índice 0-based para claves "photo_<n>", None si no aplica."""
        if not self.item_key_prefix:
            return None
        match = re.fullmatch(re.escape(self.item_key_prefix) + r"(\d+)", attribute_key)
        if not match:
            return None
        position = int(match.group(1))
        return position - 1 if position >= 1 else None


PHOTOS_SNAPSHOT = SnapshotSpec(
    key="photos",
    reference_field="photo_reference",
    fields=("photo_reference", "width", "height", "html_attributions"),
    item_key_prefix="photo_",
)

DEFAULT_SNAPSHOT_SPECS: tuple[SnapshotSpec, ...] = (PHOTOS_SNAPSHOT,)


def build_snapshot(
    items: Optional[Iterable[Any]],
    spec: SnapshotSpec,
    max_items: int,
) -> list[dict[str, Any]]:
    """
    Dedup + truncado + proyección. Items que no son objeto o no tienen
    id de referencia escalar (str o número) se descartan.
    """
    if not items or max_items <= 0:
        return []

    seen: set[Any] = set()
    snapshot: list[dict[str, Any]] = []
    for item in items:
        if not isinstance(item, Mapping):
            continue
        reference = item.get(spec.reference_field)
        if not isinstance(reference, (str, int, float)) or isinstance(reference, bool) or reference == "":
            logger.debug(f"Item de '{spec.key}' sin '{spec.reference_field}' válido, descartado")
            continue
        if reference in seen:
            continue
        seen.add(reference)
        snapshot.append({field: item.get(field) for field in spec.fields})
        if len(snapshot) >= max_items:
            break
    return snapshot


@dataclass(frozen=True)
class SnapshotOutcome:
    """Resultado de materializar un snapshot."""

    status: str  # "written" | "skipped_empty" | "cleared"
    item_count: int = 0

    @property
    def written(self) -> bool:
        return self.status in ("written", "cleared")


class SnapshotMaterializer:
    """
    Escribe snapshots vía el writer de valores (upsert por clave única),
    por lo que cada escritura reemplaza la anterior.
    """

    def __init__(
        self,
        *,
        value_writer,
        no_language_code: str,
        max_items: int,
        clear_on_empty: bool = False,
        specs: Sequence[SnapshotSpec] = DEFAULT_SNAPSHOT_SPECS,
    ) -> None:
        self._writer = value_writer
        self._no_lang = no_language_code
        self._max_items = max_items
        self._clear_on_empty = clear_on_empty
        self._specs = {spec.key: spec for spec in specs}

    def spec_for(self, definition: AttributeDefinition) -> Optional[SnapshotSpec]:
        """Spec si el atributo es un snapshot json, None en otro caso."""
        spec = self._specs.get(definition.key)
        if spec is None:
            return None
        if definition.kind is not AttributeKind.JSON:
            logger.warning(
                f"Atributo snapshot '{definition.key}' tiene input_type "
                f"'{definition.raw_kind}' (se esperaba json); se procesa como atributo normal"
            )
            return None
        return spec

    def item_spec_for(self, definition: AttributeDefinition) -> Optional[tuple[SnapshotSpec, int]]:
        """(spec, índice) si el atributo es un item indexado ("photo_3")."""
        for spec in self._specs.values():
            index = spec.item_index(definition.key)
            if index is not None:
                return spec, index
        return None

    def build(self, spec: SnapshotSpec, items: Optional[Iterable[Any]]) -> list[dict[str, Any]]:
        return build_snapshot(items, spec, self._max_items)

    async def materialize(
        self,
        *,
        location_id: int,
        definition: AttributeDefinition,
        spec: SnapshotSpec,
        items: Optional[Iterable[Any]],
        now: datetime,
    ) -> SnapshotOutcome:
        """Reemplaza el snapshot completo del lugar para este atributo."""
        snapshot = self.build(spec, items)

        if not snapshot and not self._clear_on_empty:
            logger.info(
                f"Snapshot '{definition.key}' vacío para location {location_id}: se conserva el anterior"
            )
            return SnapshotOutcome(status="skipped_empty")

        await self._writer.upsert(
            location_id=location_id,
            attribute_id=definition.attribute_id,
            language_code=self._no_lang,
            value=TaggedValue(AttributeKind.JSON, snapshot),
            updated_at=now,
        )
        status = "written" if snapshot else "cleared"
        return SnapshotOutcome(status=status, item_count=len(snapshot))

    async def materialize_item(
        self,
        *,
        location_id: int,
        definition: AttributeDefinition,
        spec: SnapshotSpec,
        index: int,
        items: Optional[Iterable[Any]],
        now: datetime,
    ) -> bool:
        """
        Escribe el item n-ésimo del snapshot deduplicado como objeto json.
        Retorna False si no existe ese índice.
        """
        snapshot = self.build(spec, items)
        if index >= len(snapshot):
            return False

        await self._writer.upsert(
            location_id=location_id,
            attribute_id=definition.attribute_id,
            language_code=self._no_lang,
            value=TaggedValue(AttributeKind.JSON, snapshot[index]),
            updated_at=now,
        )
        return True
