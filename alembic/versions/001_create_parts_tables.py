"""Create parts and part_components tables

Revision ID: 001
Revises:
Create Date: 2025-02-03 09:00:00.000000

"""
import sqlalchemy as sa

from alembic import op

# revision identifiers, used by Alembic.
revision = '001'
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    # Parts: raw parts are stocked directly, assembled parts are built
    op.create_table('parts',
    sa.Column('id', sa.Uuid(), nullable=False),
    sa.Column('name', sa.String(100), nullable=False),
    sa.Column('type', sa.Enum('RAW', 'ASSEMBLED', name='part_type', native_enum=False), nullable=False),
    sa.Column('quantity_in_stock', sa.Integer(), server_default='0', nullable=False),
    sa.Column('description', sa.String(500), nullable=True),
    sa.Column('created_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
    sa.Column('updated_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
    sa.CheckConstraint('quantity_in_stock >= 0', name='ck_parts_quantity_in_stock_non_negative'),
    sa.PrimaryKeyConstraint('id'),
    sa.UniqueConstraint('name')
    )

    # Bill of materials edges: assembled part -> component part
    op.create_table('part_components',
    sa.Column('id', sa.Uuid(), nullable=False),
    sa.Column('assembled_part_id', sa.Uuid(), nullable=False),
    sa.Column('component_part_id', sa.Uuid(), nullable=False),
    sa.Column('quantity', sa.Integer(), nullable=False),
    sa.CheckConstraint('quantity >= 1', name='ck_part_components_quantity_positive'),
    sa.ForeignKeyConstraint(['assembled_part_id'], ['parts.id'], ondelete='CASCADE'),
    sa.ForeignKeyConstraint(['component_part_id'], ['parts.id'], ),
    sa.PrimaryKeyConstraint('id'),
    sa.UniqueConstraint('assembled_part_id', 'component_part_id', name='uq_part_components_assembly_component')
    )
    op.create_index('ix_part_components_assembled_part_id', 'part_components', ['assembled_part_id'])
    op.create_index('ix_part_components_component_part_id', 'part_components', ['component_part_id'])


def downgrade() -> None:
    op.drop_index('ix_part_components_component_part_id', table_name='part_components')
    op.drop_index('ix_part_components_assembled_part_id', table_name='part_components')
    op.drop_table('part_components')
    op.drop_table('parts')
