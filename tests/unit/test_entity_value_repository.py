from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy import select

from place_enrichment.domain.entities.values import TaggedValue
from place_enrichment.infrastructure.database.models import LocationValueModel
from place_enrichment.infrastructure.repositories.entity_value_repository import EntityValueRepository
from place_enrichment.shared.constants.attribute_constants import AttributeKind


T0 = datetime(2026, 10, 1, 8, 0, tzinfo=timezone.utc)


async def _rows(session_factory):
    async with session_factory() as session:
        return list((await session.execute(select(LocationValueModel))).scalars().all())


@pytest.mark.asyncio
async def test_upsert_twice_keeps_one_row_and_advances_updated_at(session_factory, seed):
    location_id = await seed.location("place-1")
    attribute_id = await seed.definition("name")
    repo = EntityValueRepository(session_factory)
    value = TaggedValue(AttributeKind.TEXT, "Cafe X")

    await repo.upsert(location_id=location_id, attribute_id=attribute_id, language_code="en", value=value, updated_at=T0)
    await repo.upsert(
        location_id=location_id, attribute_id=attribute_id, language_code="en",
        value=value, updated_at=T0 + timedelta(hours=1),
    )

    assert len(await _rows(session_factory)) == 1
    stored = await repo.get(location_id, attribute_id, "en")
    assert stored.value == value
    assert stored.updated_at == T0 + timedelta(hours=1)


@pytest.mark.asyncio
async def test_languages_are_distinct_keys(session_factory, seed):
    location_id = await seed.location("place-1")
    attribute_id = await seed.definition("name", multilingual=True)
    repo = EntityValueRepository(session_factory)

    for language in ("en", "de", "hr"):
        await repo.upsert(
            location_id=location_id, attribute_id=attribute_id, language_code=language,
            value=TaggedValue(AttributeKind.TEXT, f"Cafe {language}"), updated_at=T0,
        )

    assert await repo.count_for_location(location_id) == 3
    assert (await repo.get(location_id, attribute_id, "de")).value.value == "Cafe de"


@pytest.mark.asyncio
async def test_overwrite_with_other_kind_clears_previous_slot(session_factory, seed):
    """Al cambiar de tipo, el slot anterior queda en NULL (un solo slot poblado)."""
    location_id = await seed.location("place-1")
    attribute_id = await seed.definition("editorial_summary", "json")
    repo = EntityValueRepository(session_factory)

    await repo.upsert(
        location_id=location_id, attribute_id=attribute_id, language_code="und",
        value=TaggedValue(AttributeKind.JSON, {"overview": "x"}), updated_at=T0,
    )
    await repo.upsert(
        location_id=location_id, attribute_id=attribute_id, language_code="und",
        value=TaggedValue(AttributeKind.TEXT, "texto plano"), updated_at=T0,
    )

    [row] = await _rows(session_factory)
    assert row.value_text == "texto plano"
    assert row.value_json is None
    assert row.value_number is None
    assert row.value_bool is None
    assert row.value_option is None


@pytest.mark.asyncio
async def test_boolean_false_and_number_zero_are_stored(session_factory, seed):
    location_id = await seed.location("place-1")
    open_id = await seed.definition("open", "boolean")
    rating_id = await seed.definition("rating", "number")
    repo = EntityValueRepository(session_factory)

    await repo.upsert(
        location_id=location_id, attribute_id=open_id, language_code="und",
        value=TaggedValue(AttributeKind.BOOLEAN, False), updated_at=T0,
    )
    await repo.upsert(
        location_id=location_id, attribute_id=rating_id, language_code="und",
        value=TaggedValue(AttributeKind.NUMBER, 0), updated_at=T0,
    )

    assert (await repo.get(location_id, open_id, "und")).value == TaggedValue(AttributeKind.BOOLEAN, False)
    assert (await repo.get(location_id, rating_id, "und")).value.value == 0


@pytest.mark.asyncio
async def test_get_missing_returns_none(session_factory):
    assert await EntityValueRepository(session_factory).get(1, 1, "en") is None
