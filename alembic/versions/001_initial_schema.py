"""initial_schema

Revision ID: 001
Revises:
Create Date: 2026-10-17 09:00:00.000000

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

# JSONB en PostgreSQL, JSON en el resto (SQLite en pruebas locales)
JSON_TYPE = sa.JSON().with_variant(postgresql.JSONB(), "postgresql")


def upgrade() -> None:
    """Upgrade schema."""
    bind = op.get_bind()
    inspector = sa.inspect(bind)

    if not inspector.has_table('Cities'):
        op.create_table('Cities',
        sa.Column('id', sa.String(length=64), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('is_public', sa.Boolean(), nullable=True),
        sa.PrimaryKeyConstraint('id')
        )

    if not inspector.has_table('Project_Status'):
        op.create_table('Project_Status',
        sa.Column('id', sa.String(length=32), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('name')
        )

    if not inspector.has_table('Project_Attributes'):
        op.create_table('Project_Attributes',
        sa.Column('id', sa.String(length=64), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('icon', sa.String(length=255), nullable=False),
        sa.PrimaryKeyConstraint('id')
        )

    if not inspector.has_table('Mega_Projects'):
        op.create_table('Mega_Projects',
        sa.Column('id', sa.String(length=64), nullable=False),
        sa.Column('slug', sa.String(length=255), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('address', sa.Text(), nullable=False),
        sa.Column('slogan', sa.Text(), nullable=False),
        sa.Column('description', sa.Text(), nullable=False),
        sa.Column('seo_title', sa.Text(), nullable=True),
        sa.Column('seo_meta_description', sa.Text(), nullable=True),
        sa.Column('attributes', JSON_TYPE, nullable=False),
        sa.Column('gallery', JSON_TYPE, nullable=False),
        sa.Column('latitude', sa.String(length=64), nullable=False),
        sa.Column('longitude', sa.String(length=64), nullable=False),
        sa.Column('is_public', sa.Boolean(), nullable=True),
        sa.PrimaryKeyConstraint('id')
        )

    if not inspector.has_table('Projects'):
        op.create_table('Projects',
        sa.Column('hc', sa.String(length=64), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('slug', sa.String(length=255), nullable=False),
        sa.Column('slogan', sa.Text(), nullable=False),
        sa.Column('address', sa.Text(), nullable=False),
        sa.Column('city', sa.String(length=255), nullable=False),
        sa.Column('small_description', sa.Text(), nullable=False),
        sa.Column('long_description', sa.Text(), nullable=False),
        sa.Column('seo_title', sa.Text(), nullable=True),
        sa.Column('seo_meta_description', sa.Text(), nullable=True),
        sa.Column('sic', sa.Text(), nullable=False),
        sa.Column('sales_room_address', sa.Text(), nullable=False),
        sa.Column('sales_room_schedule_attention', sa.Text(), nullable=False),
        sa.Column('sales_room_latitude', sa.String(length=64), nullable=False),
        sa.Column('sales_room_longitude', sa.String(length=64), nullable=False),
        sa.Column('salary_minimum_count', sa.Integer(), nullable=False),
        sa.Column('delivery_time', sa.Integer(), nullable=False),
        sa.Column('deposit', sa.BigInteger(), nullable=False),
        sa.Column('discount_description', sa.Text(), nullable=True),
        sa.Column('bonus_ref', sa.Text(), nullable=True),
        sa.Column('price_from_general', sa.BigInteger(), nullable=False),
        sa.Column('price_up_general', sa.BigInteger(), nullable=False),
        sa.Column('attributes', JSON_TYPE, nullable=False),
        sa.Column('gallery', JSON_TYPE, nullable=False),
        sa.Column('urban_plans', JSON_TYPE, nullable=False),
        sa.Column('work_progress_images', JSON_TYPE, nullable=False),
        sa.Column('tour_360', sa.Text(), nullable=True),
        sa.Column('type', sa.String(length=255), nullable=False),
        sa.Column('status', JSON_TYPE, nullable=False),
        sa.Column('highlighted', sa.Boolean(), nullable=False),
        sa.Column('built_area', sa.Float(), nullable=False),
        sa.Column('private_area', sa.Float(), nullable=False),
        sa.Column('rooms', sa.Integer(), nullable=False),
        sa.Column('bathrooms', sa.Integer(), nullable=False),
        sa.Column('relation_projects', JSON_TYPE, nullable=False),
        sa.Column('latitude', sa.String(length=64), nullable=False),
        sa.Column('longitude', sa.String(length=64), nullable=False),
        sa.Column('is_public', sa.Boolean(), nullable=True),
        sa.Column('mega_project_id', sa.String(length=64), nullable=True),
        sa.PrimaryKeyConstraint('hc')
        )
        op.create_index(op.f('ix_Projects_mega_project_id'), 'Projects', ['mega_project_id'], unique=False)

    if not inspector.has_table('Typologies'):
        op.create_table('Typologies',
        sa.Column('id', sa.String(length=64), nullable=False),
        sa.Column('project_id', sa.String(length=64), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('description', sa.Text(), nullable=False),
        sa.Column('price_from', sa.BigInteger(), nullable=False),
        sa.Column('price_up', sa.BigInteger(), nullable=False),
        sa.Column('rooms', sa.Integer(), nullable=False),
        sa.Column('bathrooms', sa.Integer(), nullable=False),
        sa.Column('built_area', sa.Float(), nullable=False),
        sa.Column('private_area', sa.Float(), nullable=False),
        sa.Column('min_separation', sa.BigInteger(), nullable=False),
        sa.Column('min_deposit', sa.BigInteger(), nullable=False),
        sa.Column('delivery_time', sa.Integer(), nullable=False),
        sa.Column('available_count', sa.Integer(), nullable=False),
        sa.Column('gallery', JSON_TYPE, nullable=False),
        sa.Column('plans', sa.Text(), nullable=True),
        sa.ForeignKeyConstraint(['project_id'], ['Projects.hc'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('project_id', 'name', name='uq_typologies_project_name')
        )
        op.create_index(op.f('ix_Typologies_project_id'), 'Typologies', ['project_id'], unique=False)

    if not inspector.has_table('id_allocations'):
        op.create_table('id_allocations',
        sa.Column('sequence', sa.String(length=64), nullable=False),
        sa.Column('next_value', sa.BigInteger(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=True),
        sa.PrimaryKeyConstraint('sequence')
        )


def downgrade() -> None:
    """Downgrade schema."""
    bind = op.get_bind()
    inspector = sa.inspect(bind)

    for table in ('id_allocations', 'Typologies', 'Projects', 'Mega_Projects',
                  'Project_Attributes', 'Project_Status', 'Cities'):
        if inspector.has_table(table):
            op.drop_table(table)
