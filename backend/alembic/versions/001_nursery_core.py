"""Pépinière Kernschema

Revision ID: 001
Revises:
Create Date: 2026-10-19

Stammdaten, Chargen mit Bestandsjournal, Bestellungen, Transfers
und Mutterpflanzen.
"""
from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

revision: str = '001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


# SQLAlchemy speichert Enum-Namen (nicht Werte)
nursery_type = sa.Enum('SEMISTO', 'PARTNER', name='nurserytype')
integration_mode = sa.Enum('PLATFORM', 'MANUAL', name='integrationmode')
growth_stage = sa.Enum('SEED', 'SEEDLING', 'YOUNG', 'ESTABLISHED', 'MATURE', name='growthstage')
movement_type = sa.Enum('RECEIPT', 'RESERVE', 'RELEASE', 'CONSUME', 'SHRINK', name='movementtype')
order_status = sa.Enum('NEW', 'PROCESSING', 'READY', 'PICKED_UP', 'CANCELLED', name='orderstatus')
price_level = sa.Enum('SOLIDARITY', 'STANDARD', 'SUPPORT', name='pricelevel')
transfer_status = sa.Enum('PLANNED', 'IN_PROGRESS', 'COMPLETED', 'CANCELLED', name='transferstatus')
mother_plant_status = sa.Enum('PENDING', 'VALIDATED', 'REJECTED', name='motherplantstatus')
mother_plant_source = sa.Enum('DESIGN_STUDIO', 'MEMBER_PROPOSAL', name='motherplantsource')


def _uuid_pk():
    return sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True, server_default=sa.text('gen_random_uuid()'))


def _timestamps():
    return [
        sa.Column('created_at', sa.DateTime, server_default=sa.text('NOW()')),
        sa.Column('updated_at', sa.DateTime, server_default=sa.text('NOW()')),
    ]


def upgrade() -> None:
    # Pépinières
    op.create_table(
        'nursery_nurseries',
        _uuid_pk(),
        sa.Column('name', sa.String(200), nullable=False, index=True),
        sa.Column('nursery_type', nursery_type, nullable=False, server_default='SEMISTO'),
        sa.Column('integration', integration_mode, nullable=False, server_default='PLATFORM'),
        sa.Column('address', sa.String(255), server_default=''),
        sa.Column('city', sa.String(100), server_default=''),
        sa.Column('postal_code', sa.String(20), server_default=''),
        sa.Column('country', sa.String(100), server_default=''),
        sa.Column('latitude', sa.Numeric(10, 6), server_default='0'),
        sa.Column('longitude', sa.Numeric(10, 6), server_default='0'),
        sa.Column('contact_name', sa.String(200), server_default=''),
        sa.Column('contact_email', sa.String(200), server_default=''),
        sa.Column('contact_phone', sa.String(50), server_default=''),
        sa.Column('website', sa.String(255), server_default=''),
        sa.Column('description', sa.Text, server_default=''),
        sa.Column('specialties', sa.JSON, server_default='[]'),
        sa.Column('is_pickup_point', sa.Boolean, server_default='true'),
        sa.Column('deleted_at', sa.DateTime),
        *_timestamps(),
    )

    # Container
    op.create_table(
        'nursery_containers',
        _uuid_pk(),
        sa.Column('name', sa.String(100), nullable=False),
        sa.Column('short_name', sa.String(20), nullable=False),
        sa.Column('volume_liters', sa.Numeric(7, 2)),
        sa.Column('description', sa.Text, server_default=''),
        sa.Column('sort_order', sa.Integer, server_default='0'),
        *_timestamps(),
    )

    # Chargen
    op.create_table(
        'nursery_stock_batches',
        _uuid_pk(),
        sa.Column('nursery_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('nursery_nurseries.id'), nullable=False, index=True),
        sa.Column('container_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('nursery_containers.id'), nullable=False, index=True),
        sa.Column('species_id', sa.String(100), nullable=False, index=True),
        sa.Column('species_name', sa.String(200), nullable=False),
        sa.Column('variety_id', sa.String(100), server_default=''),
        sa.Column('variety_name', sa.String(200), server_default=''),
        sa.Column('growth_stage', growth_stage, nullable=False, server_default='YOUNG'),
        sa.Column('origin', sa.String(200), server_default=''),
        sa.Column('sowing_date', sa.Date),
        sa.Column('quantity', sa.Integer, nullable=False, server_default='0'),
        sa.Column('available_quantity', sa.Integer, nullable=False, server_default='0'),
        sa.Column('reserved_quantity', sa.Integer, nullable=False, server_default='0'),
        sa.Column('price_euros', sa.Numeric(12, 2), nullable=False, server_default='0'),
        sa.Column('accepts_semos', sa.Boolean, server_default='false'),
        sa.Column('price_semos', sa.Numeric(12, 2)),
        sa.Column('notes', sa.Text, server_default=''),
        sa.Column('deleted_at', sa.DateTime),
        *_timestamps(),
        sa.CheckConstraint('available_quantity >= 0', name='ck_batch_available_non_negative'),
        sa.CheckConstraint('reserved_quantity >= 0', name='ck_batch_reserved_non_negative'),
        sa.CheckConstraint(
            'available_quantity + reserved_quantity <= quantity',
            name='ck_batch_counters_within_quantity',
        ),
    )

    # Bestellungen
    op.create_table(
        'nursery_orders',
        _uuid_pk(),
        sa.Column('order_number', sa.String(20), nullable=False, unique=True, index=True),
        sa.Column('customer_id', sa.String(100), server_default=''),
        sa.Column('customer_name', sa.String(200), nullable=False),
        sa.Column('customer_email', sa.String(200), server_default=''),
        sa.Column('customer_phone', sa.String(50), server_default=''),
        sa.Column('is_member', sa.Boolean, server_default='false'),
        sa.Column('price_level', price_level, nullable=False, server_default='STANDARD'),
        sa.Column('pickup_nursery_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('nursery_nurseries.id'), nullable=False, index=True),
        sa.Column('status', order_status, nullable=False, server_default='NEW', index=True),
        sa.Column('subtotal_euros', sa.Numeric(12, 2), nullable=False, server_default='0'),
        sa.Column('subtotal_semos', sa.Numeric(12, 2), nullable=False, server_default='0'),
        sa.Column('total_euros', sa.Numeric(12, 2), nullable=False, server_default='0'),
        sa.Column('total_semos', sa.Numeric(12, 2), nullable=False, server_default='0'),
        sa.Column('notes', sa.Text, server_default=''),
        sa.Column('prepared_at', sa.DateTime),
        sa.Column('ready_at', sa.DateTime),
        sa.Column('picked_up_at', sa.DateTime),
        sa.Column('cancelled_at', sa.DateTime),
        *_timestamps(),
    )

    op.create_table(
        'nursery_order_lines',
        _uuid_pk(),
        sa.Column('order_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('nursery_orders.id', ondelete='CASCADE'), nullable=False),
        sa.Column('position', sa.Integer, nullable=False),
        sa.Column('stock_batch_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('nursery_stock_batches.id'), nullable=False, index=True),
        sa.Column('nursery_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('nursery_nurseries.id'), nullable=False),
        sa.Column('nursery_name', sa.String(200), nullable=False),
        sa.Column('species_name', sa.String(200), nullable=False),
        sa.Column('variety_name', sa.String(200), server_default=''),
        sa.Column('container_name', sa.String(100), nullable=False),
        sa.Column('quantity', sa.Integer, nullable=False),
        sa.Column('unit_price_euros', sa.Numeric(12, 2), nullable=False, server_default='0'),
        sa.Column('unit_price_semos', sa.Numeric(12, 2)),
        sa.Column('pay_in_semos', sa.Boolean, server_default='false'),
        sa.Column('total_euros', sa.Numeric(12, 2), nullable=False, server_default='0'),
        sa.Column('total_semos', sa.Numeric(12, 2), nullable=False, server_default='0'),
        sa.Column('reserved_quantity', sa.Integer, nullable=False, server_default='0'),
        *_timestamps(),
    )

    op.create_table(
        'nursery_order_audit_logs',
        _uuid_pk(),
        sa.Column('order_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('nursery_orders.id', ondelete='CASCADE'), nullable=False),
        sa.Column('action', sa.String(50), nullable=False),
        sa.Column('old_values', sa.JSON),
        sa.Column('new_values', sa.JSON),
        sa.Column('user_name', sa.String(200)),
        sa.Column('reason', sa.Text),
        sa.Column('created_at', sa.DateTime, server_default=sa.text('NOW()')),
    )

    # Bestandsjournal
    op.create_table(
        'nursery_stock_movements',
        _uuid_pk(),
        sa.Column('stock_batch_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('nursery_stock_batches.id'), nullable=False, index=True),
        sa.Column('movement_type', movement_type, nullable=False, index=True),
        sa.Column('quantity', sa.Integer, nullable=False),
        sa.Column('quantity_before', sa.Integer, nullable=False),
        sa.Column('quantity_after', sa.Integer, nullable=False),
        sa.Column('available_before', sa.Integer, nullable=False),
        sa.Column('available_after', sa.Integer, nullable=False),
        sa.Column('reserved_before', sa.Integer, nullable=False),
        sa.Column('reserved_after', sa.Integer, nullable=False),
        sa.Column('order_line_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('nursery_order_lines.id', ondelete='SET NULL')),
        sa.Column('reason', sa.Text),
        sa.Column('created_by', sa.String(200)),
        sa.Column('created_at', sa.DateTime, server_default=sa.text('NOW()')),
    )

    # Transfers
    op.create_table(
        'nursery_transfers',
        _uuid_pk(),
        sa.Column('order_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('nursery_orders.id'), nullable=False, index=True),
        sa.Column('status', transfer_status, nullable=False, server_default='PLANNED', index=True),
        sa.Column('stops', sa.JSON, nullable=False, server_default='[]'),
        sa.Column('total_distance_km', sa.Numeric(8, 2), server_default='0'),
        sa.Column('estimated_duration', sa.String(50), server_default=''),
        sa.Column('driver_id', sa.String(100), server_default=''),
        sa.Column('driver_name', sa.String(200), server_default=''),
        sa.Column('vehicle_info', sa.String(200), server_default=''),
        sa.Column('scheduled_date', sa.Date, nullable=False, index=True),
        sa.Column('notes', sa.Text, server_default=''),
        sa.Column('started_at', sa.DateTime),
        sa.Column('completed_at', sa.DateTime),
        *_timestamps(),
    )

    # Mutterpflanzen
    op.create_table(
        'nursery_mother_plants',
        _uuid_pk(),
        sa.Column('species_id', sa.String(100), nullable=False),
        sa.Column('species_name', sa.String(200), nullable=False),
        sa.Column('variety_id', sa.String(100), server_default=''),
        sa.Column('variety_name', sa.String(200), server_default=''),
        sa.Column('place_id', sa.String(100), server_default=''),
        sa.Column('place_name', sa.String(200), server_default=''),
        sa.Column('place_address', sa.String(255), server_default=''),
        sa.Column('planting_date', sa.Date, nullable=False),
        sa.Column('quantity', sa.Integer, server_default='0'),
        sa.Column('source', mother_plant_source, nullable=False, server_default='MEMBER_PROPOSAL'),
        sa.Column('project_id', sa.String(100), server_default=''),
        sa.Column('project_name', sa.String(200), server_default=''),
        sa.Column('member_id', sa.String(100), server_default=''),
        sa.Column('member_name', sa.String(200), server_default=''),
        sa.Column('status', mother_plant_status, nullable=False, server_default='PENDING', index=True),
        sa.Column('validated_by', sa.String(200), server_default=''),
        sa.Column('validated_at', sa.DateTime),
        sa.Column('notes', sa.Text, server_default=''),
        sa.Column('last_harvest_date', sa.Date),
        *_timestamps(),
    )


def downgrade() -> None:
    op.drop_table('nursery_mother_plants')
    op.drop_table('nursery_transfers')
    op.drop_table('nursery_stock_movements')
    op.drop_table('nursery_order_audit_logs')
    op.drop_table('nursery_order_lines')
    op.drop_table('nursery_orders')
    op.drop_table('nursery_stock_batches')
    op.drop_table('nursery_containers')
    op.drop_table('nursery_nurseries')

    bind = op.get_bind()
    for enum in (
        mother_plant_source, mother_plant_status, transfer_status, price_level,
        order_status, movement_type, growth_stage, integration_mode, nursery_type,
    ):
        enum.drop(bind, checkfirst=True)
