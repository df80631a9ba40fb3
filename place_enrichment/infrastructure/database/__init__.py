"""
Configuración de base de datos.

Importa todos los modelos para que se registren con Base
antes de crear las tablas.
"""
from place_enrichment.infrastructure.database.models import (
    AttributeDefinitionModel,
    AttributeCategoryLinkModel,
    LocationModel,
    LocationValueModel,
)
