"""
Cliente del proveedor de datos de lugares (Google Places).
"""
from place_enrichment.infrastructure.external.places.places_client import PlacesClient
from place_enrichment.infrastructure.external.places.types import PlaceDetailsResponse

__all__ = ["PlacesClient", "PlaceDetailsResponse"]
