"""
Orquestación de traducciones por idioma.

- Atributo no multilingüe: valor base verbatim bajo el marcador "und"
- Idioma destino == idioma base: valor base verbatim
- Solo strings se envían al traductor; números, booleanos y json pasan igual
- Cualquier fallo del traductor (timeout, error, respuesta vacía) se loguea
  y se usa el valor base: nunca falla la entidad
"""

from __future__ import annotations

import asyncio
from typing import Any, Optional, Protocol, Sequence

from loguru import logger

from place_enrichment.domain.entities.attribute import AttributeDefinition


class Translator(Protocol):
    """Colaborador de traducción (p.ej. OpenAI)."""

    async def translate(self, text: str, target_language: str) -> str:
        ...


class TranslationOrchestrator:
    """Obtiene el valor adecuado de un atributo para cada idioma."""

    def __init__(
        self,
        *,
        translator: Optional[Translator],
        baseline_language: str,
        target_languages: Sequence[str],
        no_language_code: str,
        timeout_s: float = 60.0,
        max_concurrent: int = 4,
    ) -> None:
        self._translator = translator
        self._baseline = baseline_language
        self._languages = list(target_languages)
        self._no_lang = no_language_code
        self._timeout_s = timeout_s
        self._semaphore = asyncio.Semaphore(max(1, max_concurrent))

    @property
    def baseline_language(self) -> str:
        return self._baseline

    def languages_for(self, definition: AttributeDefinition) -> list[str]:
        """Idiomas destino, o solo el marcador sin idioma."""
        if definition.multilingual:
            return list(self._languages)
        return [self._no_lang]

    async def value_for_language(
        self,
        definition: AttributeDefinition,
        raw_value: Any,
        language: str,
    ) -> Any:
        """Valor de `raw_value` para `language` (traducido si corresponde)."""
        if not definition.multilingual:
            return raw_value
        if language == self._baseline:
            return raw_value
        if not isinstance(raw_value, str):
            return raw_value
        if self._translator is None:
            return raw_value

        try:
            async with self._semaphore:
                translated = await asyncio.wait_for(
                    self._translator.translate(raw_value, language),
                    timeout=self._timeout_s,
                )
        except asyncio.TimeoutError:
            logger.error(
                f"Timeout traduciendo '{definition.key}' a {language}; se usa el valor base"
            )
            return raw_value
        except Exception as e:
            logger.error(
                f"Error traduciendo '{definition.key}' a {language}: {e}; se usa el valor base"
            )
            return raw_value

        if not isinstance(translated, str) or not translated.strip():
            logger.warning(
                f"Traducción vacía o malformada para '{definition.key}' ({language}); se usa el valor base"
            )
            return raw_value
        return translated.strip()
