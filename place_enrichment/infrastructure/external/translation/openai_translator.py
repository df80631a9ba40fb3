"""
Traductor basado en la API de OpenAI (chat completions).
"""
from typing import Optional

from loguru import logger
from openai import AsyncOpenAI

from place_enrichment.shared.exceptions.domain import TranslationException


SYSTEM_PROMPT = (
    "Translate the following text into the language with ISO code '{language}'. "
    "Return only the translated text, without comments."
)


class OpenAITranslator:
    """
    Traduce textos cortos de lugares (nombres, direcciones, resúmenes).

    Cualquier fallo se propaga como TranslationException; el orquestador
    decide el fallback.
    """

    def __init__(
        self,
        api_key: str,
        model: str = "gpt-4o",
        timeout_s: float = 60.0,
        client: Optional[AsyncOpenAI] = None,
    ):
        self.model = model
        self._client = client or AsyncOpenAI(api_key=api_key, timeout=timeout_s, max_retries=0)

    async def translate(self, text: str, target_language: str) -> str:
        """
        Traduce `text` al idioma destino.

        Args:
            text: Texto en el idioma base
            target_language: Código ISO del idioma destino

        Returns:
            str: Texto traducido
        """
        try:
            response = await self._client.chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": SYSTEM_PROMPT.format(language=target_language)},
                    {"role": "user", "content": text},
                ],
            )
        except Exception as e:
            raise TranslationException(target_language, str(e)) from e

        try:
            content = response.choices[0].message.content
        except (AttributeError, IndexError) as e:
            raise TranslationException(target_language, "respuesta sin choices") from e

        if not content or not content.strip():
            raise TranslationException(target_language, "respuesta vacía")

        logger.debug(f"OpenAI tradujo {len(text)} caracteres a {target_language}")
        return content.strip()
