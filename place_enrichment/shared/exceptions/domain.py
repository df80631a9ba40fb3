"""
Excepciones del pipeline de descubrimiento y materialización.

Ninguna de ellas aborta una corrida: los casos de uso las capturan
por entidad / atributo / idioma y las cuentan en el reporte.
"""
from typing import Any

from place_enrichment.shared.exceptions.base import AppException


class PipelineException(AppException):
    """Excepción base para errores del pipeline."""

    def __init__(self, message: str, error_code: str = "PIPELINE_ERROR", details=None):
        super().__init__(
            message=message,
            error_code=error_code,
            details=details
        )


class ConfigurationException(PipelineException):
    """Configuración obligatoria ausente o inválida."""

    def __init__(self, setting_name: str, reason: str = "no configurada"):
        super().__init__(
            message=f"Configuración '{setting_name}' {reason}",
            error_code="CONFIGURATION_ERROR",
            details={"setting": setting_name}
        )


class PlaceProviderException(PipelineException):
    """Error de red o HTTP al consultar el proveedor de lugares."""

    def __init__(self, place_id: str, language: str, reason: str):
        super().__init__(
            message=f"Place Details falló para {place_id} ({language}): {reason}",
            error_code="PROVIDER_ERROR",
            details={"place_id": place_id, "language": language, "reason": reason}
        )
        self.place_id = place_id
        self.language = language
        self.reason = reason


class TranslationException(PipelineException):
    """Error del traductor externo (timeout, error, respuesta malformada)."""

    def __init__(self, target_language: str, reason: str):
        super().__init__(
            message=f"Traducción a '{target_language}' falló: {reason}",
            error_code="TRANSLATION_ERROR",
            details={"target_language": target_language, "reason": reason}
        )
        self.target_language = target_language


class CoercionException(PipelineException):
    """Un valor no puede convertirse al tipo de su atributo."""

    def __init__(self, kind: str, value: Any):
        super().__init__(
            message=f"No se pudo convertir {value!r} a '{kind}'",
            error_code="COERCION_ERROR",
            details={"kind": kind, "value": repr(value)[:200]}
        )
        self.kind = kind


class UnknownAttributeKindException(PipelineException):
    """input_type desconocido en attribute_definitions (calidad de datos)."""

    def __init__(self, raw_kind: Any, key: str = None):
        details = {"input_type": str(raw_kind)}
        if key:
            details["key"] = key
        super().__init__(
            message=f"input_type desconocido '{raw_kind}'" + (f" para {key}" if key else ""),
            error_code="UNKNOWN_ATTRIBUTE_KIND",
            details=details
        )
        self.raw_kind = raw_kind
