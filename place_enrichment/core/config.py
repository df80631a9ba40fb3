"""
Configuracion central del pipeline de enriquecimiento.
Gestiona variables de entorno y configuraciones globales.

Las listas (idiomas, claves excluidas, fields de descubrimiento) aceptan
tanto un array JSON como un string separado por comas.
"""
import json
from typing import List
from pydantic_settings import BaseSettings
from pydantic import Field, computed_field


class Settings(BaseSettings):
    """
    Clase de configuracion del pipeline.
    Lee variables de entorno y proporciona valores por defecto.

    - DATABASE_URL se puede especificar completa o por componentes
    - OPENAI_API_KEY vacia desactiva las traducciones (se usa el valor base)
    """

    # Configuracion de la aplicacion
    DEBUG: bool = Field(default=False)

    # Base de datos - Componentes separados
    DATABASE_HOST: str = Field(default="localhost")
    DATABASE_PORT: int = Field(default=5432)
    DATABASE_USER: str = Field(default="places_user")
    DATABASE_PASSWORD: str = Field(default="places_pass")
    DATABASE_NAME: str = Field(default="places_db")

    # Base de datos - URL completa (override de componentes si se proporciona)
    DATABASE_URL: str = Field(default="")
    DB_POOL_SIZE: int = Field(default=5)
    DB_MAX_OVERFLOW: int = Field(default=10)

    # Proveedor de datos de lugares (Google Places, endpoint legacy JSON)
    GOOGLE_API_KEY: str = Field(default="")
    PLACES_BASE_URL: str = Field(default="https://maps.googleapis.com/maps/api/place")
    PROVIDER_TIMEOUT_S: float = Field(default=60.0)
    DISCOVERY_FIELDS: str = Field(
        default=(
            "address_components,adr_address,formatted_address,geometry,icon,name,"
            "opening_hours,photos,place_id,plus_code,types,url,vicinity,"
            "formatted_phone_number,website,price_level,rating,user_ratings_total"
        )
    )

    # Traduccion (OpenAI)
    OPENAI_API_KEY: str = Field(default="")
    TRANSLATION_MODEL: str = Field(default="gpt-4o")
    TRANSLATION_TIMEOUT_S: float = Field(default=60.0)

    # Idiomas
    BASELINE_LANGUAGE: str = Field(default="en")
    TARGET_LANGUAGES: str = Field(default="de,en,it,fr,hr")
    NO_LANGUAGE_CODE: str = Field(default="und")

    # Concurrencia (limites por rate-limit de proveedor y traductor)
    MAX_CONCURRENT_ENTITIES: int = Field(default=4)
    MAX_CONCURRENT_TRANSLATIONS: int = Field(default=4)

    # Snapshots (fotos)
    SNAPSHOT_MAX_ITEMS: int = Field(default=10)
    SNAPSHOT_CLEAR_ON_EMPTY: bool = Field(default=False)

    # Materializacion
    EXCLUDED_ATTRIBUTE_KEYS: str = Field(default="reviews")
    DISPLAY_NAME_KEY: str = Field(default="name")

    # Cadencia de refresco
    WEEKLY_REFRESH_WEEKDAY: int = Field(default=0)
    MONTHLY_REFRESH_DAY: int = Field(default=1)

    # Logging
    LOG_LEVEL: str = Field(default="INFO")
    LOG_FILE: str = Field(default="")

    @computed_field
    @property
    def effective_database_url(self) -> str:
        """
        Retorna la URL de base de datos efectiva.
        Si DATABASE_URL esta definida, la usa directamente.
        Si no, construye la URL desde los componentes individuales.
        """
        if self.DATABASE_URL:
            return self.DATABASE_URL
        return (
            f"postgresql+asyncpg://{self.DATABASE_USER}:{self.DATABASE_PASSWORD}"
            f"@{self.DATABASE_HOST}:{self.DATABASE_PORT}/{self.DATABASE_NAME}"
        )

    @property
    def target_languages(self) -> List[str]:
        return parse_list_setting(self.TARGET_LANGUAGES)

    @property
    def excluded_attribute_keys(self) -> List[str]:
        return parse_list_setting(self.EXCLUDED_ATTRIBUTE_KEYS)

    @property
    def discovery_fields(self) -> List[str]:
        return parse_list_setting(self.DISCOVERY_FIELDS)

    class Config:
        """Configuracion de Pydantic."""
        env_file = ".env"
        case_sensitive = True
        extra = "ignore"  # Ignorar campos extra del .env


def parse_list_setting(raw: str) -> List[str]:
    """
    Parsea una configuracion de tipo lista.
    Acepta una lista JSON o un string separado por comas.
    """
    raw = (raw or "").strip()
    if not raw:
        return []
    if raw.startswith("["):
        try:
            return [str(item).strip() for item in json.loads(raw) if str(item).strip()]
        except json.JSONDecodeError:
            # Si no es JSON valido, se trata como lista separada por comas
            raw = raw.strip("[]")
    return [item.strip() for item in raw.split(",") if item.strip()]


# Instancia global de configuracion
settings = Settings()
