"""
Cliente mínimo de Google Place Details (endpoint legacy JSON).

Requisitos cubiertos:
- httpx async con timeout por request
- selección de fields (?fields=...)
- status de la API distinto de OK -> respuesta con ok=False (no excepción)
- errores de red / HTTP -> PlaceProviderException
"""

from __future__ import annotations

from typing import Any, Optional, Sequence

import httpx
from loguru import logger

from place_enrichment.shared.exceptions.domain import PlaceProviderException

from .types import PlaceDetailsResponse


class PlacesClient:
    """
    Cliente HTTP de Place Details.

    Importante:
    - No hace cast de tipos: el registro se devuelve tal cual (anidado).
    - Reintentos/backoff quedan fuera: los decide quien orquesta la corrida.
    """

    def __init__(
        self,
        api_key: str,
        *,
        base_url: str = "https://maps.googleapis.com/maps/api/place",
        timeout_s: float = 60.0,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self._api_key = api_key
        self._base_url = base_url.rstrip("/")
        self._timeout_s = timeout_s
        self._client = client
        self._owns_client = client is None

    async def __aenter__(self) -> "PlacesClient":
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self._timeout_s)
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    def _http(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self._timeout_s)
            self._owns_client = True
        return self._client

    async def fetch_details(
        self,
        place_id: str,
        language: str,
        fields: Optional[Sequence[str]] = None,
    ) -> PlaceDetailsResponse:
        """
        Obtiene Place Details de un lugar en un idioma.

        Args:
            place_id: Google Place ID
            language: Código de idioma de la respuesta
            fields: Selección de fields; None = todos

        Raises:
            PlaceProviderException: error de red, timeout o HTTP no-2xx
        """
        params: dict[str, Any] = {
            "place_id": place_id,
            "language": language,
            "key": self._api_key,
        }
        if fields:
            params["fields"] = ",".join(fields)

        url = f"{self._base_url}/details/json"
        try:
            resp = await self._http().get(url, params=params)
            resp.raise_for_status()
            payload = resp.json()
        except httpx.TimeoutException as e:
            raise PlaceProviderException(place_id, language, "timeout") from e
        except httpx.HTTPStatusError as e:
            raise PlaceProviderException(
                place_id, language, f"HTTP {e.response.status_code}"
            ) from e
        except (httpx.HTTPError, ValueError) as e:
            raise PlaceProviderException(place_id, language, str(e) or type(e).__name__) from e

        if not isinstance(payload, dict):
            raise PlaceProviderException(place_id, language, "respuesta no es un objeto JSON")

        response = PlaceDetailsResponse.from_payload(place_id, language, payload)
        if not response.ok:
            logger.warning(f"Place Details not OK para {place_id} ({language}): {response.reason}")
        return response
