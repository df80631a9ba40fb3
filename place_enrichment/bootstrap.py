"""
Construcción "oficial" de los casos de uso a partir de settings.

Las piezas se inyectan explícitamente para poder sustituirlas en tests
(proveedor, traductor, session factory).
"""
from __future__ import annotations

from typing import Optional

from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from place_enrichment.application.services.snapshot import SnapshotMaterializer
from place_enrichment.application.services.translation import TranslationOrchestrator, Translator
from place_enrichment.application.use_cases.discovery_use_cases import AttributeDiscoveryUseCase
from place_enrichment.application.use_cases.materialization_use_cases import LocationEnrichmentUseCase
from place_enrichment.core.config import Settings, settings as default_settings
from place_enrichment.infrastructure.external.places import PlacesClient
from place_enrichment.infrastructure.external.translation import OpenAITranslator
from place_enrichment.infrastructure.repositories.attribute_repository import AttributeRepository
from place_enrichment.infrastructure.repositories.entity_value_repository import EntityValueRepository
from place_enrichment.infrastructure.repositories.location_repository import LocationRepository
from place_enrichment.shared.exceptions.domain import ConfigurationException


def build_places_client(config: Settings = default_settings) -> PlacesClient:
    """Cliente de Place Details; GOOGLE_API_KEY es obligatoria."""
    if not config.GOOGLE_API_KEY:
        raise ConfigurationException("GOOGLE_API_KEY")
    return PlacesClient(
        config.GOOGLE_API_KEY,
        base_url=config.PLACES_BASE_URL,
        timeout_s=config.PROVIDER_TIMEOUT_S,
    )


def build_translator(config: Settings = default_settings) -> Optional[Translator]:
    """Traductor OpenAI, o None si no hay API key (se usará el valor base)."""
    if not config.OPENAI_API_KEY:
        logger.warning("CONFIG: OPENAI_API_KEY no configurada - las traducciones usarán el texto original")
        return None
    return OpenAITranslator(
        config.OPENAI_API_KEY,
        model=config.TRANSLATION_MODEL,
        timeout_s=config.TRANSLATION_TIMEOUT_S,
    )


def build_discovery_use_case(
    session_factory: async_sessionmaker[AsyncSession],
    places_client,
    config: Settings = default_settings,
) -> AttributeDiscoveryUseCase:
    return AttributeDiscoveryUseCase(
        attribute_repository=AttributeRepository(session_factory),
        places_client=places_client,
        language=config.BASELINE_LANGUAGE,
        fields=config.discovery_fields,
        max_concurrent=config.MAX_CONCURRENT_ENTITIES,
    )


def build_enrichment_use_case(
    session_factory: async_sessionmaker[AsyncSession],
    places_client,
    translator: Optional[Translator],
    config: Settings = default_settings,
) -> LocationEnrichmentUseCase:
    value_repository = EntityValueRepository(session_factory)
    translation = TranslationOrchestrator(
        translator=translator,
        baseline_language=config.BASELINE_LANGUAGE,
        target_languages=config.target_languages,
        no_language_code=config.NO_LANGUAGE_CODE,
        timeout_s=config.TRANSLATION_TIMEOUT_S,
        max_concurrent=config.MAX_CONCURRENT_TRANSLATIONS,
    )
    snapshots = SnapshotMaterializer(
        value_writer=value_repository,
        no_language_code=config.NO_LANGUAGE_CODE,
        max_items=config.SNAPSHOT_MAX_ITEMS,
        clear_on_empty=config.SNAPSHOT_CLEAR_ON_EMPTY,
    )
    return LocationEnrichmentUseCase(
        location_repository=LocationRepository(session_factory),
        attribute_repository=AttributeRepository(session_factory),
        value_repository=value_repository,
        places_client=places_client,
        translation=translation,
        snapshots=snapshots,
        excluded_keys=config.excluded_attribute_keys,
        display_name_key=config.DISPLAY_NAME_KEY or None,
        max_concurrent=config.MAX_CONCURRENT_ENTITIES,
    )
