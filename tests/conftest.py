"""
Configuración de fixtures para pytest.
"""
from __future__ import annotations

from typing import Any, AsyncGenerator, Iterable, Optional

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from place_enrichment.infrastructure.database.models import (
    AttributeCategoryLinkModel,
    AttributeDefinitionModel,
    LocationModel,
)
from place_enrichment.infrastructure.database.session import create_session_factory, init_db
from place_enrichment.infrastructure.external.places.types import PlaceDetailsResponse
from place_enrichment.shared.exceptions.domain import PlaceProviderException


@pytest.fixture(scope="function")
async def session_factory(tmp_path) -> AsyncGenerator[async_sessionmaker[AsyncSession], None]:
    """
    Session factory sobre una base SQLite en archivo (una por test).
    Se usa archivo y no :memory: para que varias sesiones concurrentes
    vean las mismas tablas.
    """
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}", echo=False)
    await init_db(engine)

    yield create_session_factory(engine)

    await engine.dispose()


class Seeder:
    """Inserta filas de prueba (lugares, definiciones, alcances)."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self._session_factory = session_factory

    async def location(
        self,
        google_place_id: str,
        *,
        category_id: Optional[int] = None,
        display_name: Optional[str] = None,
    ) -> int:
        async with self._session_factory() as session:
            model = LocationModel(
                google_place_id=google_place_id,
                category_id=category_id,
                display_name=display_name,
            )
            session.add(model)
            await session.commit()
            return model.id

    async def definition(
        self,
        key: str,
        input_type: str = "text",
        *,
        multilingual: bool = False,
        is_active: bool = True,
        update_tier: str = "every_run",
        categories: Iterable[int] = (),
    ) -> int:
        async with self._session_factory() as session:
            model = AttributeDefinitionModel(
                key=key,
                label=key,
                input_type=input_type,
                multilingual=multilingual,
                is_active=is_active,
                update_tier=update_tier,
            )
            session.add(model)
            await session.flush()
            for category_id in categories:
                session.add(AttributeCategoryLinkModel(attribute_id=model.attribute_id, category_id=category_id))
            await session.commit()
            return model.attribute_id


@pytest.fixture
def seed(session_factory) -> Seeder:
    return Seeder(session_factory)


class FakePlacesClient:
    """
    Proveedor en memoria.

    - records: place_id -> result (status OK)
    - statuses: place_id -> status distinto de OK
    - errors: place_ids que lanzan PlaceProviderException
    """

    def __init__(self):
        self.records: dict[str, dict[str, Any]] = {}
        self.statuses: dict[str, str] = {}
        self.errors: set[str] = set()
        self.calls: list[tuple[str, str, Optional[list[str]]]] = []

    async def fetch_details(self, place_id, language, fields=None) -> PlaceDetailsResponse:
        self.calls.append((place_id, language, list(fields) if fields else None))
        if place_id in self.errors:
            raise PlaceProviderException(place_id, language, "timeout")
        if place_id in self.statuses:
            return PlaceDetailsResponse(place_id=place_id, language=language, status=self.statuses[place_id])
        if place_id not in self.records:
            return PlaceDetailsResponse(place_id=place_id, language=language, status="NOT_FOUND")
        return PlaceDetailsResponse(
            place_id=place_id, language=language, status="OK", result=self.records[place_id]
        )


@pytest.fixture
def fake_places() -> FakePlacesClient:
    return FakePlacesClient()


class FakeTranslator:
    """Traduce anteponiendo el código de idioma: "Cafe" -> "[de] Cafe"."""

    def __init__(self, failing_languages: Iterable[str] = ()):
        self.failing_languages = set(failing_languages)
        self.calls: list[tuple[str, str]] = []

    async def translate(self, text: str, target_language: str) -> str:
        self.calls.append((text, target_language))
        if target_language in self.failing_languages:
            raise RuntimeError(f"traductor caído para {target_language}")
        return f"[{target_language}] {text}"


@pytest.fixture
def fake_translator() -> FakeTranslator:
    return FakeTranslator()
