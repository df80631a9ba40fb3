"""
Casos de uso de descubrimiento de atributos.

Aplana cada registro del proveedor, infiere el tipo de cada hoja y
registra las claves nuevas como definiciones INACTIVAS. La activación
es un proceso de curación externo.
"""
from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Any, Iterable, Mapping, Optional, Sequence

from loguru import logger

from place_enrichment.application.services.key_flattener import flatten_record
from place_enrichment.application.services.type_inferencer import infer_kind
from place_enrichment.application.services.work_list import WorkItem
from place_enrichment.shared.exceptions.domain import (
    ConfigurationException,
    PlaceProviderException,
)


@dataclass
class DiscoveryResult:
    """Resultado del descubrimiento sobre un registro."""

    registered: list[str] = field(default_factory=list)
    existing: int = 0
    failed: list[str] = field(default_factory=list)


@dataclass
class DiscoveryReport:
    """Totales de un scan completo."""

    places_scanned: int = 0
    places_skipped: int = 0
    keys_registered: int = 0
    keys_existing: int = 0
    keys_failed: int = 0
    registered_keys: list[str] = field(default_factory=list)

    def add(self, result: DiscoveryResult) -> None:
        self.places_scanned += 1
        self.keys_registered += len(result.registered)
        self.keys_existing += result.existing
        self.keys_failed += len(result.failed)
        self.registered_keys.extend(result.registered)


class AttributeDiscoveryUseCase:
    """
    Orquestador del descubrimiento de schema.
    """

    def __init__(
        self,
        *,
        attribute_repository,
        places_client=None,
        language: str = "en",
        fields: Optional[Sequence[str]] = None,
        max_concurrent: int = 4,
    ) -> None:
        self._attributes = attribute_repository
        self._places = places_client
        self._language = language
        self._fields = list(fields) if fields else None
        self._max_concurrent = max(1, max_concurrent)

    async def discover_record(self, record: Mapping[str, Any]) -> DiscoveryResult:
        """
        Registra las claves nuevas de un registro.
        Un fallo al registrar una clave no detiene las demás.
        """
        result = DiscoveryResult()
        for key in flatten_record(record):
            kind = infer_kind(record, key)
            try:
                created = await self._attributes.register_if_absent(key, kind)
            except Exception as e:
                logger.error(f"Error registrando atributo '{key}': {e}")
                result.failed.append(key)
                continue

            if created:
                logger.info(f"Nuevo atributo: {key} ({kind.value})")
                result.registered.append(key)
            else:
                result.existing += 1
        return result

    async def scan_place(self, item: WorkItem) -> Optional[DiscoveryResult]:
        """Descubre atributos de un lugar; None si no hubo datos."""
        if self._places is None:
            raise ConfigurationException("places_client", "requerido para el scan")

        try:
            response = await self._places.fetch_details(item.place_id, self._language, self._fields)
        except PlaceProviderException as e:
            logger.error(f"Sin datos para {item.place_id}: {e.message}")
            return None

        if not response.ok:
            return None

        logger.info(f"Scan de {item.place_id}")
        return await self.discover_record(response.result)

    async def scan(self, items: Iterable[WorkItem]) -> DiscoveryReport:
        """Ejecuta el descubrimiento sobre la lista de trabajo."""
        report = DiscoveryReport()
        semaphore = asyncio.Semaphore(self._max_concurrent)

        async def _guarded(item: WorkItem) -> Optional[DiscoveryResult]:
            async with semaphore:
                try:
                    return await self.scan_place(item)
                except Exception as e:
                    logger.exception(f"Error inesperado en scan de {item.place_id}: {e}")
                    return None

        results = await asyncio.gather(*(_guarded(item) for item in items))
        for result in results:
            if result is None:
                report.places_skipped += 1
            else:
                report.add(result)

        logger.success(
            f"Scan de atributos completado: lugares={report.places_scanned}, "
            f"omitidos={report.places_skipped}, nuevos={report.keys_registered}, "
            f"fallidos={report.keys_failed}"
        )
        return report
