"""initial_schema

Revision ID: 001
Revises:
Create Date: 2026-10-18 10:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision: str = '001'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""
    bind = op.get_bind()
    inspector = sa.inspect(bind)

    if not inspector.has_table('attribute_definitions'):
        op.create_table('attribute_definitions',
        sa.Column('attribute_id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('key', sa.String(length=512), nullable=False),
        sa.Column('label', sa.String(length=512), nullable=True),
        sa.Column('input_type', sa.String(length=32), nullable=False, server_default='text'),
        sa.Column('multilingual', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('update_tier', sa.String(length=32), nullable=False, server_default='every_run'),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=True),
        sa.PrimaryKeyConstraint('attribute_id')
        )
        # UNIQUE(key): respaldo de register_if_absent (ON CONFLICT DO NOTHING)
        op.create_index(op.f('ix_attribute_definitions_key'), 'attribute_definitions', ['key'], unique=True)

    if not inspector.has_table('attribute_category_links'):
        op.create_table('attribute_category_links',
        sa.Column('attribute_id', sa.Integer(), nullable=False),
        sa.Column('category_id', sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(['attribute_id'], ['attribute_definitions.attribute_id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('attribute_id', 'category_id')
        )
        op.create_index(op.f('ix_attribute_category_links_category_id'), 'attribute_category_links', ['category_id'], unique=False)

    if not inspector.has_table('locations'):
        op.create_table('locations',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('google_place_id', sa.String(length=255), nullable=False),
        sa.Column('display_name', sa.String(length=512), nullable=True),
        sa.Column('category_id', sa.Integer(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=True),
        sa.PrimaryKeyConstraint('id')
        )
        op.create_index(op.f('ix_locations_google_place_id'), 'locations', ['google_place_id'], unique=True)
        op.create_index(op.f('ix_locations_category_id'), 'locations', ['category_id'], unique=False)

    if not inspector.has_table('location_values'):
        op.create_table('location_values',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('location_id', sa.Integer(), nullable=False),
        sa.Column('attribute_id', sa.Integer(), nullable=False),
        sa.Column('language_code', sa.String(length=8), nullable=False),
        sa.Column('value_text', sa.Text(), nullable=True),
        sa.Column('value_number', sa.Float(), nullable=True),
        sa.Column('value_bool', sa.Boolean(), nullable=True),
        sa.Column('value_json', postgresql.JSONB(astext_type=sa.Text()), nullable=True),
        sa.Column('value_option', sa.Text(), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(['attribute_id'], ['attribute_definitions.attribute_id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['location_id'], ['locations.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        # Clave de idempotencia del upsert
        sa.UniqueConstraint('location_id', 'attribute_id', 'language_code', name='uq_location_values_location_attribute_language')
        )
        op.create_index(op.f('ix_location_values_location_id'), 'location_values', ['location_id'], unique=False)
        op.create_index(op.f('ix_location_values_attribute_id'), 'location_values', ['attribute_id'], unique=False)


def downgrade() -> None:
    """Downgrade schema."""
    bind = op.get_bind()
    inspector = sa.inspect(bind)

    for table in ('location_values', 'locations', 'attribute_category_links', 'attribute_definitions'):
        if inspector.has_table(table):
            op.drop_table(table)
