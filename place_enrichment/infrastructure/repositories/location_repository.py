"""
Repositorio de lugares (solo lectura para el pipeline).
"""
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from place_enrichment.domain.entities.location import Location
from place_enrichment.infrastructure.database.models import LocationModel


class LocationRepository:
    """
    Resuelve lugares por Google Place ID.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self._session_factory = session_factory

    async def get_by_place_id(self, google_place_id: str) -> Optional[Location]:
        """
        Obtiene un lugar por su Place ID.
        """
        async with self._session_factory() as session:
            query = select(LocationModel).where(LocationModel.google_place_id == google_place_id)
            model = (await session.execute(query)).scalar_one_or_none()

        if model is None:
            return None
        return Location(
            id=model.id,
            google_place_id=model.google_place_id,
            display_name=model.display_name,
            category_id=model.category_id,
        )
