"""
Repositorio del schema registry (attribute_definitions).

El registro de claves nuevas es un INSERT ... ON CONFLICT (key) DO NOTHING:
la restricción UNIQUE de la tabla resuelve las carreras entre entidades
procesadas en paralelo (y entre procesos), sin check-then-insert.
"""
from __future__ import annotations

from collections import defaultdict
from typing import Iterable, Optional

from loguru import logger
from sqlalchemy import not_, or_, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from place_enrichment.domain.entities.attribute import AttributeDefinition
from place_enrichment.infrastructure.database.models import (
    AttributeCategoryLinkModel,
    AttributeDefinitionModel,
)
from place_enrichment.infrastructure.repositories._dialect import dialect_insert
from place_enrichment.shared.constants.attribute_constants import AttributeKind, UpdateTier


def _parse_tier(raw: Optional[str]) -> UpdateTier:
    try:
        return UpdateTier(raw or UpdateTier.EVERY_RUN.value)
    except ValueError:
        logger.warning(f"update_tier desconocido '{raw}', se usa every_run")
        return UpdateTier.EVERY_RUN


def to_entity(model: AttributeDefinitionModel, category_scope: Iterable[int] = ()) -> AttributeDefinition:
    """Convierte un modelo ORM a entidad de dominio."""
    return AttributeDefinition(
        attribute_id=model.attribute_id,
        key=model.key,
        kind=AttributeKind.from_raw(model.input_type),
        raw_kind=model.input_type,
        multilingual=bool(model.multilingual),
        is_active=bool(model.is_active),
        update_tier=_parse_tier(model.update_tier),
        category_scope=frozenset(category_scope),
    )


class AttributeRepository:
    """
    Gestiona la tabla attribute_definitions.
    Nunca modifica is_active ni los links de categoría.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self._session_factory = session_factory

    async def exists(self, key: str) -> bool:
        """Verifica si ya existe una definición con esa clave."""
        async with self._session_factory() as session:
            query = select(AttributeDefinitionModel.attribute_id).where(
                AttributeDefinitionModel.key == key
            )
            result = await session.execute(query)
            return result.first() is not None

    async def get_by_key(self, key: str) -> Optional[AttributeDefinition]:
        """Obtiene una definición por clave, con su alcance de categorías."""
        async with self._session_factory() as session:
            query = select(AttributeDefinitionModel).where(AttributeDefinitionModel.key == key)
            model = (await session.execute(query)).scalar_one_or_none()
            if model is None:
                return None
            scopes = await self._load_scopes(session, [model.attribute_id])
            return to_entity(model, scopes.get(model.attribute_id, ()))

    async def register_if_absent(self, key: str, kind: AttributeKind) -> bool:
        """
        Inserta la definición (inactiva) si la clave no existe.

        Returns:
            bool: True si se creó la fila, False si ya existía
        """
        async with self._session_factory() as session:
            stmt = (
                dialect_insert(session, AttributeDefinitionModel.__table__)
                .values(
                    key=key,
                    label=key,
                    input_type=kind.value,
                    multilingual=False,
                    is_active=False,
                    update_tier=UpdateTier.EVERY_RUN.value,
                )
                .on_conflict_do_nothing(index_elements=["key"])
            )
            result = await session.execute(stmt)
            await session.commit()
            return (result.rowcount or 0) > 0

    async def active_definitions_for(
        self,
        category_id: Optional[int],
        tiers: Iterable[UpdateTier],
    ) -> list[AttributeDefinition]:
        """
        Definiciones elegibles en esta corrida: activas, con tier incluido
        y sin alcance de categorías o con `category_id` en su alcance.
        """
        tier_values = [UpdateTier(t).value for t in tiers]
        if not tier_values:
            return []

        defs = AttributeDefinitionModel
        links = AttributeCategoryLinkModel
        has_scope = (
            select(links.attribute_id)
            .where(links.attribute_id == defs.attribute_id)
            .exists()
        )
        scope_conditions = [not_(has_scope)]
        if category_id is not None:
            scope_conditions.append(
                select(links.attribute_id)
                .where(
                    links.attribute_id == defs.attribute_id,
                    links.category_id == category_id,
                )
                .exists()
            )

        query = (
            select(defs)
            .where(
                defs.is_active.is_(True),
                defs.update_tier.in_(tier_values),
                or_(*scope_conditions),
            )
            .order_by(defs.attribute_id)
        )

        async with self._session_factory() as session:
            models = list((await session.execute(query)).scalars().all())
            scopes = await self._load_scopes(session, [m.attribute_id for m in models])

        return [to_entity(m, scopes.get(m.attribute_id, ())) for m in models]

    async def _load_scopes(self, session: AsyncSession, attribute_ids: list[int]) -> dict[int, set[int]]:
        if not attribute_ids:
            return {}
        query = select(AttributeCategoryLinkModel).where(
            AttributeCategoryLinkModel.attribute_id.in_(attribute_ids)
        )
        scopes: dict[int, set[int]] = defaultdict(set)
        for link in (await session.execute(query)).scalars().all():
            scopes[link.attribute_id].add(link.category_id)
        return scopes
