"""
Repositorio de valores (location_values).

UPSERT por (location_id, attribute_id, language_code):
- si la fila existe se sobrescribe completa (todos los slots en NULL
  salvo el del tipo del valor)
- si no existe se inserta
Una sola sentencia por clave: atómica, sin read-then-write.
"""
from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from place_enrichment.domain.entities.values import EntityValue, TaggedValue
from place_enrichment.infrastructure.database.models import LocationValueModel
from place_enrichment.infrastructure.repositories._dialect import dialect_insert
from place_enrichment.shared.constants.attribute_constants import VALUE_SLOTS
from place_enrichment.shared.utils.datetime_utils import ensure_utc


CONFLICT_COLUMNS = ["location_id", "attribute_id", "language_code"]


class EntityValueRepository:
    """Único dueño de las filas de location_values."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self._session_factory = session_factory

    async def upsert(
        self,
        *,
        location_id: int,
        attribute_id: int,
        language_code: str,
        value: TaggedValue,
        updated_at: datetime,
    ) -> None:
        """Inserta o reemplaza el valor de la clave (lugar, atributo, idioma)."""
        row = {
            "location_id": location_id,
            "attribute_id": attribute_id,
            "language_code": language_code,
            "updated_at": ensure_utc(updated_at),
            **value.to_columns(),
        }

        async with self._session_factory() as session:
            stmt = dialect_insert(session, LocationValueModel.__table__).values(**row)
            update_columns = list(VALUE_SLOTS.values()) + ["updated_at"]
            stmt = stmt.on_conflict_do_update(
                index_elements=CONFLICT_COLUMNS,
                set_={column: stmt.excluded[column] for column in update_columns},
            )
            await session.execute(stmt)
            await session.commit()

    async def get(
        self,
        location_id: int,
        attribute_id: int,
        language_code: str,
    ) -> Optional[EntityValue]:
        """Lee un valor almacenado; None si no existe."""
        async with self._session_factory() as session:
            query = select(LocationValueModel).where(
                LocationValueModel.location_id == location_id,
                LocationValueModel.attribute_id == attribute_id,
                LocationValueModel.language_code == language_code,
            )
            model = (await session.execute(query)).scalar_one_or_none()

        if model is None:
            return None
        tagged = TaggedValue.from_columns(
            {column: getattr(model, column) for column in VALUE_SLOTS.values()}
        )
        if tagged is None:
            return None
        return EntityValue(
            location_id=model.location_id,
            attribute_id=model.attribute_id,
            language_code=model.language_code,
            value=tagged,
            updated_at=ensure_utc(model.updated_at),
        )

    async def count_for_location(self, location_id: int) -> int:
        """Cantidad de valores almacenados para un lugar."""
        async with self._session_factory() as session:
            query = select(func.count()).select_from(LocationValueModel).where(
                LocationValueModel.location_id == location_id
            )
            return int((await session.execute(query)).scalar_one())
