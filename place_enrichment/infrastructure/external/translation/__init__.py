"""
Colaborador de traducción.
"""
from place_enrichment.infrastructure.external.translation.openai_translator import OpenAITranslator

__all__ = ["OpenAITranslator"]
