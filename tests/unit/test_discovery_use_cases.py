import pytest
from unittest.mock import AsyncMock

from place_enrichment.application.services.work_list import WorkItem
from place_enrichment.application.use_cases.discovery_use_cases import AttributeDiscoveryUseCase
from place_enrichment.infrastructure.repositories.attribute_repository import AttributeRepository
from place_enrichment.shared.constants.attribute_constants import AttributeKind
from place_enrichment.shared.exceptions.domain import ConfigurationException


CAFE_X = {
    "name": "Cafe X",
    "rating": 4.5,
    "open": True,
    "photos": [{"ref": "p1"}, {"ref": "p1"}, {"ref": "p2"}],
}


@pytest.mark.asyncio
async def test_discover_record_registers_inferred_kinds(session_factory):
    """
    Registro de ejemplo: name (text), rating (number), open (boolean),
    photos (json), todos inactivos.
    """
    repo = AttributeRepository(session_factory)
    use_case = AttributeDiscoveryUseCase(attribute_repository=repo)

    result = await use_case.discover_record(CAFE_X)

    assert result.registered == ["name", "rating", "open", "photos"]
    expected = {
        "name": AttributeKind.TEXT,
        "rating": AttributeKind.NUMBER,
        "open": AttributeKind.BOOLEAN,
        "photos": AttributeKind.JSON,
    }
    for key, kind in expected.items():
        definition = await repo.get_by_key(key)
        assert definition.kind is kind
        assert definition.is_active is False


@pytest.mark.asyncio
async def test_rediscovery_creates_no_duplicates(session_factory):
    use_case = AttributeDiscoveryUseCase(attribute_repository=AttributeRepository(session_factory))

    await use_case.discover_record(CAFE_X)
    second = await use_case.discover_record({**CAFE_X, "website": "https://cafe.example"})

    assert second.registered == ["website"]
    assert second.existing == 4


@pytest.mark.asyncio
async def test_registration_failure_does_not_stop_other_keys():
    repo = AsyncMock()
    repo.register_if_absent.side_effect = [True, RuntimeError("db caída"), True, False]
    use_case = AttributeDiscoveryUseCase(attribute_repository=repo)

    result = await use_case.discover_record(CAFE_X)

    assert result.registered == ["name", "open"]
    assert result.failed == ["rating"]
    assert result.existing == 1
    assert repo.register_if_absent.await_count == 4


@pytest.mark.asyncio
async def test_scan_skips_places_without_data(session_factory, fake_places):
    fake_places.records["ok-1"] = {"name": "Cafe X", "geometry": {"location": {"lat": 45.8, "lng": 15.9}}}
    fake_places.records["ok-2"] = {"name": "Bar Y", "rating": 4.0}
    fake_places.statuses["denied"] = "REQUEST_DENIED"
    fake_places.errors.add("broken")
    use_case = AttributeDiscoveryUseCase(
        attribute_repository=AttributeRepository(session_factory),
        places_client=fake_places,
        fields=["name", "geometry", "rating"],
        max_concurrent=2,
    )

    report = await use_case.scan(
        [WorkItem("ok-1"), WorkItem("denied"), WorkItem("broken"), WorkItem("ok-2")]
    )

    assert report.places_scanned == 2
    assert report.places_skipped == 2
    assert report.keys_registered == 4
    assert report.keys_existing == 1
    assert sorted(report.registered_keys) == [
        "geometry.location.lat", "geometry.location.lng", "name", "rating",
    ]
    assert all(call[1] == "en" and call[2] == ["name", "geometry", "rating"] for call in fake_places.calls)


@pytest.mark.asyncio
async def test_scan_place_requires_provider():
    use_case = AttributeDiscoveryUseCase(attribute_repository=AsyncMock())

    with pytest.raises(ConfigurationException):
        await use_case.scan_place(WorkItem("ok-1"))
