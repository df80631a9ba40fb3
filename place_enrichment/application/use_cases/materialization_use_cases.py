"""
Casos de uso de materialización de valores por lugar e idioma.

Flujo por lugar:
1. Resolver el lugar por Place ID
2. Cargar definiciones activas para su categoría y los tiers de la corrida
3. Traer el registro del proveedor UNA vez, en el idioma base
4. Por atributo: snapshot (fotos) o valor normal; por idioma
   (concurrente): traducir -> convertir -> upsert

Ningún error de un atributo/idioma aborta el lugar, y ningún error de un
lugar aborta la corrida: todo queda contado en el RunReport.
"""
from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Iterable, Optional, Sequence

from loguru import logger
from sqlalchemy.exc import SQLAlchemyError

from place_enrichment.application.services.key_flattener import root_field
from place_enrichment.application.services.snapshot import SnapshotMaterializer
from place_enrichment.application.services.translation import TranslationOrchestrator
from place_enrichment.application.services.type_inferencer import resolve_path
from place_enrichment.application.services.value_coercer import coerce_value
from place_enrichment.application.services.work_list import WorkItem
from place_enrichment.domain.entities.attribute import AttributeDefinition
from place_enrichment.domain.entities.location import Location
from place_enrichment.shared.constants.attribute_constants import UpdateTier
from place_enrichment.shared.exceptions.domain import (
    CoercionException,
    PlaceProviderException,
)
from place_enrichment.shared.utils.datetime_utils import utc_now


# Resultado de una escritura (atributo, idioma)
WRITTEN = "written"
WRITTEN_FALLBACK = "written_fallback"
SKIPPED = "skipped"
FAILED = "failed"


@dataclass
class EntityOutcome:
    """Resultado de materializar un lugar."""

    place_id: str
    status: str = "processed"  # "processed" | "skipped" | "failed"
    reason: Optional[str] = None
    values_written: int = 0
    values_skipped: int = 0
    values_failed: int = 0
    fallbacks: int = 0

    def count(self, result: str) -> None:
        if result in (WRITTEN, WRITTEN_FALLBACK):
            self.values_written += 1
            if result == WRITTEN_FALLBACK:
                self.fallbacks += 1
        elif result == SKIPPED:
            self.values_skipped += 1
        else:
            self.values_failed += 1


@dataclass
class RunReport:
    """Totales de una corrida de materialización."""

    entities_processed: int = 0
    entities_skipped: int = 0
    entities_failed: int = 0
    values_written: int = 0
    values_skipped: int = 0
    values_failed: int = 0
    fallbacks: int = 0
    outcomes: list[EntityOutcome] = field(default_factory=list)

    def add(self, outcome: EntityOutcome) -> None:
        self.outcomes.append(outcome)
        if outcome.status == "processed":
            self.entities_processed += 1
        elif outcome.status == "skipped":
            self.entities_skipped += 1
        else:
            self.entities_failed += 1
        self.values_written += outcome.values_written
        self.values_skipped += outcome.values_skipped
        self.values_failed += outcome.values_failed
        self.fallbacks += outcome.fallbacks

    @property
    def total_entities(self) -> int:
        return self.entities_processed + self.entities_skipped + self.entities_failed


class LocationEnrichmentUseCase:
    """
    Orquestador de la materialización de atributos de lugares.
    """

    def __init__(
        self,
        *,
        location_repository,
        attribute_repository,
        value_repository,
        places_client,
        translation: TranslationOrchestrator,
        snapshots: SnapshotMaterializer,
        excluded_keys: Sequence[str] = (),
        display_name_key: Optional[str] = "name",
        max_concurrent: int = 4,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._locations = location_repository
        self._attributes = attribute_repository
        self._values = value_repository
        self._places = places_client
        self._translation = translation
        self._snapshots = snapshots
        self._excluded_keys = set(excluded_keys)
        self._display_name_key = display_name_key
        self._max_concurrent = max(1, max_concurrent)
        self._clock = clock

    async def run(self, items: Iterable[WorkItem], tiers: Iterable[UpdateTier]) -> RunReport:
        """
        Procesa la lista de trabajo con paralelismo acotado.
        La corrida siempre termina y retorna los conteos.
        """
        tiers = frozenset(tiers)
        semaphore = asyncio.Semaphore(self._max_concurrent)
        report = RunReport()

        async def _guarded(item: WorkItem) -> EntityOutcome:
            async with semaphore:
                try:
                    return await self.enrich_location(item, tiers)
                except Exception as e:
                    logger.exception(f"Error inesperado procesando {item.place_id}: {e}")
                    return EntityOutcome(place_id=item.place_id, status="failed", reason=str(e)[:200])

        logger.info(
            f"Iniciando materialización: tiers={sorted(t.value for t in tiers)}"
        )
        outcomes = await asyncio.gather(*(_guarded(item) for item in items))
        for outcome in outcomes:
            report.add(outcome)

        logger.success(
            f"Materialización completada: lugares ok={report.entities_processed}, "
            f"omitidos={report.entities_skipped}, fallidos={report.entities_failed}, "
            f"valores escritos={report.values_written}, omitidos={report.values_skipped}, "
            f"fallidos={report.values_failed}, fallbacks={report.fallbacks}"
        )
        return report

    async def enrich_location(self, item: WorkItem, tiers: Iterable[UpdateTier]) -> EntityOutcome:
        """Materializa todos los atributos elegibles de un lugar."""
        outcome = EntityOutcome(place_id=item.place_id)

        location = await self._locations.get_by_place_id(item.place_id)
        if location is None:
            logger.warning(f"No existe location para {item.place_id}")
            outcome.status, outcome.reason = "skipped", "location_not_found"
            return outcome

        definitions = [
            d for d in await self._attributes.active_definitions_for(location.category_id, tiers)
            if d.key not in self._excluded_keys
        ]
        if not definitions:
            logger.info(f"Sin atributos activos para {item.place_id} en esta corrida")
            outcome.status, outcome.reason = "skipped", "no_active_attributes"
            return outcome

        record = await self._fetch_record(location, definitions)
        if record is None:
            outcome.status, outcome.reason = "skipped", "provider_no_data"
            return outcome

        logger.info(f"Procesando: {location.display_name or item.place_id} ({item.place_id})")
        for definition in definitions:
            await self._materialize_attribute(location, definition, record, item, outcome)

        return outcome

    def _fields_for(self, definitions: Sequence[AttributeDefinition]) -> list[str]:
        """Fields raíz a pedir al proveedor para estas definiciones."""
        fields: set[str] = set()
        for definition in definitions:
            item_spec = self._snapshots.item_spec_for(definition)
            fields.add(item_spec[0].key if item_spec else root_field(definition.key))
        return sorted(fields)

    async def _fetch_record(
        self,
        location: Location,
        definitions: Sequence[AttributeDefinition],
    ) -> Optional[dict[str, Any]]:
        language = self._translation.baseline_language
        try:
            response = await self._places.fetch_details(
                location.google_place_id, language, self._fields_for(definitions)
            )
        except PlaceProviderException as e:
            logger.error(f"Sin datos para {location.google_place_id}: {e.message}")
            return None

        if not response.ok:
            return None
        return response.result

    async def _materialize_attribute(
        self,
        location: Location,
        definition: AttributeDefinition,
        record: dict[str, Any],
        item: WorkItem,
        outcome: EntityOutcome,
    ) -> None:
        snapshot_spec = self._snapshots.spec_for(definition)
        if snapshot_spec is not None:
            outcome.count(await self._materialize_snapshot(location, definition, snapshot_spec, record))
            return

        item_spec = self._snapshots.item_spec_for(definition)
        if item_spec is not None:
            outcome.count(await self._materialize_snapshot_item(location, definition, item_spec, record))
            return

        if definition.kind is None:
            logger.warning(
                f"input_type desconocido '{definition.raw_kind}' para {definition.key}, se omite"
            )
            outcome.count(SKIPPED)
            return

        raw_value = resolve_path(record, definition.key)
        if item.preferred_name and definition.key == self._display_name_key:
            raw_value = item.preferred_name
        if raw_value is None or raw_value == "":
            outcome.count(SKIPPED)
            return

        languages = self._translation.languages_for(definition)
        results = await asyncio.gather(
            *(self._materialize_language(location, definition, raw_value, lang) for lang in languages)
        )
        for result in results:
            outcome.count(result)

    async def _materialize_language(
        self,
        location: Location,
        definition: AttributeDefinition,
        raw_value: Any,
        language: str,
    ) -> str:
        """Un (atributo, idioma): cualquier error queda contado en esa escritura."""
        try:
            return await self._write_language(location, definition, raw_value, language)
        except Exception as e:
            logger.exception(f"Error inesperado en {definition.key} [{language}]: {e}")
            return FAILED

    async def _write_language(
        self,
        location: Location,
        definition: AttributeDefinition,
        raw_value: Any,
        language: str,
    ) -> str:
        """Traduce, convierte y guarda un (atributo, idioma)."""
        value = await self._translation.value_for_language(definition, raw_value, language)

        try:
            coerced = coerce_value(value, definition.kind, key=definition.key)
        except CoercionException as e:
            logger.warning(f"{definition.key} [{language}] omitido: {e.message}")
            return SKIPPED

        try:
            await self._values.upsert(
                location_id=location.id,
                attribute_id=definition.attribute_id,
                language_code=language,
                value=coerced.tagged,
                updated_at=self._clock(),
            )
        except SQLAlchemyError as e:
            logger.error(f"Error guardando {definition.key} [{language}]: {e}")
            return FAILED

        logger.debug(f"{definition.key} [{language}] guardado")
        return WRITTEN_FALLBACK if coerced.fallback else WRITTEN

    async def _materialize_snapshot(self, location, definition, spec, record) -> str:
        try:
            result = await self._snapshots.materialize(
                location_id=location.id,
                definition=definition,
                spec=spec,
                items=resolve_path(record, spec.key),
                now=self._clock(),
            )
        except SQLAlchemyError as e:
            logger.error(f"Error guardando snapshot {definition.key}: {e}")
            return FAILED
        except Exception as e:
            logger.exception(f"Error inesperado en snapshot {definition.key}: {e}")
            return FAILED

        if not result.written:
            return SKIPPED
        logger.info(f"Snapshot {definition.key} guardado ({result.item_count} items)")
        return WRITTEN

    async def _materialize_snapshot_item(self, location, definition, item_spec, record) -> str:
        spec, index = item_spec
        try:
            written = await self._snapshots.materialize_item(
                location_id=location.id,
                definition=definition,
                spec=spec,
                index=index,
                items=resolve_path(record, spec.key),
                now=self._clock(),
            )
        except SQLAlchemyError as e:
            logger.error(f"Error guardando {definition.key}: {e}")
            return FAILED
        except Exception as e:
            logger.exception(f"Error inesperado en {definition.key}: {e}")
            return FAILED
        return WRITTEN if written else SKIPPED
