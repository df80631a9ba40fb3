"""
Tipos del cliente de Place Details.

Se mantienen libres de I/O para poder testearlos fácilmente.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional


@dataclass(frozen=True)
class PlaceDetailsResponse:
    """
    Respuesta de Place Details.

    status "OK" trae `result`; cualquier otro status (NOT_FOUND,
    OVER_QUERY_LIMIT, INVALID_REQUEST, ...) significa "sin datos en esta
    corrida" para ese lugar/idioma.
    """

    place_id: str
    language: str
    status: str
    result: dict[str, Any] = field(default_factory=dict)
    error_message: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.status == "OK"

    @property
    def reason(self) -> str:
        """Código de motivo legible para logs."""
        return self.error_message or self.status or "UNKNOWN"

    @classmethod
    def from_payload(cls, place_id: str, language: str, payload: dict[str, Any]) -> "PlaceDetailsResponse":
        status = str(payload.get("status") or "UNKNOWN")
        result = payload.get("result")
        if status == "OK" and not isinstance(result, dict):
            status = "MALFORMED_RESPONSE"
        return cls(
            place_id=place_id,
            language=language,
            status=status,
            result=result if status == "OK" else {},
            error_message=payload.get("error_message"),
        )
