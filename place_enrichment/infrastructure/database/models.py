"""
Modelos de base de datos (ORM).

- attribute_definitions: schema dinámico descubierto del proveedor
- attribute_category_links: alcance por categoría (curado externamente)
- locations: lugares importados (solo lectura para el pipeline)
- location_values: valores por (lugar, atributo, idioma)
"""
from sqlalchemy import (
    Column,
    String,
    Integer,
    DateTime,
    Text,
    Boolean,
    Float,
    JSON,
    ForeignKey,
    UniqueConstraint,
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.sql import func

from place_enrichment.infrastructure.database.session import Base
from place_enrichment.shared.constants.attribute_constants import UpdateTier


# JSONB en Postgres, JSON en SQLite. None se guarda como NULL SQL.
JsonValue = JSON(none_as_null=True).with_variant(JSONB(none_as_null=True), "postgresql")


class AttributeDefinitionModel(Base):
    """Definición de atributo. `key` es único: es la clave de idempotencia del descubrimiento."""

    __tablename__ = "attribute_definitions"

    attribute_id = Column(Integer, primary_key=True, autoincrement=True)
    key = Column(String(512), nullable=False, unique=True, index=True)
    label = Column(String(512), nullable=True)
    input_type = Column(String(32), nullable=False, default="text")
    multilingual = Column(Boolean, nullable=False, default=False)
    is_active = Column(Boolean, nullable=False, default=False)
    update_tier = Column(String(32), nullable=False, default=UpdateTier.EVERY_RUN.value)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    def __repr__(self):
        return f"<AttributeDefinition(id={self.attribute_id}, key={self.key}, type={self.input_type})>"


class AttributeCategoryLinkModel(Base):
    """Relación many-to-many atributo <-> categoría."""

    __tablename__ = "attribute_category_links"

    attribute_id = Column(
        Integer,
        ForeignKey("attribute_definitions.attribute_id", ondelete="CASCADE"),
        primary_key=True,
    )
    category_id = Column(Integer, primary_key=True, index=True)


class LocationModel(Base):
    """Lugar importado desde Google Places."""

    __tablename__ = "locations"

    id = Column(Integer, primary_key=True, autoincrement=True)
    google_place_id = Column(String(255), nullable=False, unique=True, index=True)
    display_name = Column(String(512), nullable=True)
    category_id = Column(Integer, nullable=True, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    def __repr__(self):
        return f"<Location(id={self.id}, place_id={self.google_place_id})>"


class LocationValueModel(Base):
    """
    Valor de un atributo por lugar e idioma.
    Exactamente un slot value_* poblado por fila.
    """

    __tablename__ = "location_values"
    __table_args__ = (
        UniqueConstraint(
            "location_id", "attribute_id", "language_code",
            name="uq_location_values_location_attribute_language"
        ),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    location_id = Column(Integer, ForeignKey("locations.id", ondelete="CASCADE"), nullable=False, index=True)
    attribute_id = Column(
        Integer,
        ForeignKey("attribute_definitions.attribute_id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    language_code = Column(String(8), nullable=False)
    value_text = Column(Text, nullable=True)
    value_number = Column(Float, nullable=True)
    value_bool = Column(Boolean, nullable=True)
    value_json = Column(JsonValue, nullable=True)
    value_option = Column(Text, nullable=True)
    updated_at = Column(DateTime(timezone=True), nullable=False)

    def __repr__(self):
        return (
            f"<LocationValue(location={self.location_id}, attribute={self.attribute_id}, "
            f"lang={self.language_code})>"
        )
