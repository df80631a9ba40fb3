from datetime import datetime, timezone
from unittest.mock import AsyncMock

import pytest

from place_enrichment.application.services.snapshot import (
    PHOTOS_SNAPSHOT,
    SnapshotMaterializer,
    SnapshotSpec,
    build_snapshot,
)
from place_enrichment.domain.entities.attribute import AttributeDefinition
from place_enrichment.domain.entities.values import TaggedValue
from place_enrichment.infrastructure.repositories.entity_value_repository import EntityValueRepository
from place_enrichment.shared.constants.attribute_constants import AttributeKind


NOW = datetime(2026, 10, 1, 8, 0, tzinfo=timezone.utc)
REF_SPEC = SnapshotSpec(key="photos", reference_field="ref", fields=("ref",), item_key_prefix="photo_")


def _photos_definition(attribute_id: int = 1, raw_kind: str = "json") -> AttributeDefinition:
    return AttributeDefinition(
        attribute_id=attribute_id,
        key="photos",
        kind=AttributeKind.from_raw(raw_kind),
        raw_kind=raw_kind,
        is_active=True,
    )


def test_build_snapshot_dedup_keeps_first_occurrence_and_caps():
    items = [{"ref": "p1", "n": 1}, {"ref": "p1", "n": 2}, {"ref": "p2"}, {"ref": "p3"}]
    spec = SnapshotSpec(key="photos", reference_field="ref", fields=("ref", "n"))

    assert build_snapshot(items, spec, max_items=2) == [{"ref": "p1", "n": 1}, {"ref": "p2", "n": None}]


def test_build_snapshot_never_exceeds_max_with_three_times_the_items():
    max_items = 4
    items = [{"ref": f"p{i % (3 * max_items)}"} for i in range(3 * max_items * 2)]

    snapshot = build_snapshot(items, REF_SPEC, max_items)

    assert len(snapshot) == max_items
    assert len({item["ref"] for item in snapshot}) == max_items


def test_build_snapshot_projects_whitelist_and_drops_items_without_reference():
    items = [
        {"photo_reference": "abc", "width": 800, "height": 600, "html_attributions": ["x"], "extra": 1},
        {"width": 10},
        "not-an-object",
    ]

    assert build_snapshot(items, PHOTOS_SNAPSHOT, 10) == [
        {"photo_reference": "abc", "width": 800, "height": 600, "html_attributions": ["x"]}
    ]


def test_build_snapshot_empty_inputs():
    assert build_snapshot(None, REF_SPEC, 10) == []
    assert build_snapshot([], REF_SPEC, 10) == []
    assert build_snapshot([{"ref": "p1"}], REF_SPEC, 0) == []


def test_item_index():
    assert PHOTOS_SNAPSHOT.item_index("photo_1") == 0
    assert PHOTOS_SNAPSHOT.item_index("photo_10") == 9
    assert PHOTOS_SNAPSHOT.item_index("photo_0") is None
    assert PHOTOS_SNAPSHOT.item_index("photos") is None
    assert PHOTOS_SNAPSHOT.item_index("photo_x") is None


def test_spec_for_requires_json_kind():
    materializer = SnapshotMaterializer(value_writer=AsyncMock(), no_language_code="und", max_items=10)

    assert materializer.spec_for(_photos_definition()) is PHOTOS_SNAPSHOT
    assert materializer.spec_for(_photos_definition(raw_kind="text")) is None


@pytest.mark.asyncio
async def test_empty_snapshot_is_not_written_by_default():
    """Sin fotos en esta corrida: el snapshot anterior se conserva."""
    writer = AsyncMock()
    materializer = SnapshotMaterializer(value_writer=writer, no_language_code="und", max_items=10, specs=(REF_SPEC,))

    outcome = await materializer.materialize(
        location_id=1, definition=_photos_definition(), spec=REF_SPEC, items=[], now=NOW
    )

    assert outcome.status == "skipped_empty"
    assert outcome.written is False
    writer.upsert.assert_not_awaited()


@pytest.mark.asyncio
async def test_empty_snapshot_is_cleared_when_configured():
    writer = AsyncMock()
    materializer = SnapshotMaterializer(
        value_writer=writer, no_language_code="und", max_items=10, clear_on_empty=True, specs=(REF_SPEC,)
    )

    outcome = await materializer.materialize(
        location_id=1, definition=_photos_definition(), spec=REF_SPEC, items=None, now=NOW
    )

    assert outcome.status == "cleared"
    writer.upsert.assert_awaited_once_with(
        location_id=1,
        attribute_id=1,
        language_code="und",
        value=TaggedValue(AttributeKind.JSON, []),
        updated_at=NOW,
    )


@pytest.mark.asyncio
async def test_snapshot_replaces_previous_value(session_factory, seed):
    """{A, B} y luego {C}: queda exactamente {C}, nunca {A, B, C}."""
    location_id = await seed.location("place-1")
    attribute_id = await seed.definition("photos", "json")
    definition = _photos_definition(attribute_id)
    repo = EntityValueRepository(session_factory)
    materializer = SnapshotMaterializer(value_writer=repo, no_language_code="und", max_items=10, specs=(REF_SPEC,))

    await materializer.materialize(
        location_id=location_id, definition=definition, spec=REF_SPEC,
        items=[{"ref": "A"}, {"ref": "B"}], now=NOW,
    )
    await materializer.materialize(
        location_id=location_id, definition=definition, spec=REF_SPEC,
        items=[{"ref": "C"}], now=NOW,
    )

    stored = await repo.get(location_id, attribute_id, "und")
    assert stored.value == TaggedValue(AttributeKind.JSON, [{"ref": "C"}])
    assert await repo.count_for_location(location_id) == 1


@pytest.mark.asyncio
async def test_materialize_item_writes_nth_deduplicated_item():
    writer = AsyncMock()
    materializer = SnapshotMaterializer(value_writer=writer, no_language_code="und", max_items=10, specs=(REF_SPEC,))
    definition = AttributeDefinition(attribute_id=7, key="photo_2", kind=AttributeKind.JSON, raw_kind="json")
    spec, index = materializer.item_spec_for(definition)
    items = [{"ref": "p1"}, {"ref": "p1"}, {"ref": "p2"}]

    assert await materializer.materialize_item(
        location_id=1, definition=definition, spec=spec, index=index, items=items, now=NOW
    ) is True
    assert writer.upsert.await_args.kwargs["value"] == TaggedValue(AttributeKind.JSON, {"ref": "p2"})

    writer.upsert.reset_mock()
    assert await materializer.materialize_item(
        location_id=1, definition=definition, spec=spec, index=5, items=items, now=NOW
    ) is False
    writer.upsert.assert_not_awaited()


def test_build_snapshot_drops_non_scalar_references():
    items = [
        {"photo_reference": {"x": 1}},
        {"photo_reference": ["a", "b"]},
        {"photo_reference": True},
        {"photo_reference": "abc"},
        {"photo_reference": 42},
    ]

    snapshot = build_snapshot(items, PHOTOS_SNAPSHOT, 10)

    assert [item["photo_reference"] for item in snapshot] == ["abc", 42]
