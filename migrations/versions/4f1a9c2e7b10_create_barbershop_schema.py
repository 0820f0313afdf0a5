"""create_barbershop_schema

Revision ID: 4f1a9c2e7b10
Revises:
Create Date: 2025-11-10 09:12:44.118203

Creates services, professionals, professional_services and appointments,
including the partial unique index that keeps one live appointment per
professional per instant.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '4f1a9c2e7b10'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


professional_status = sa.Enum('active', 'inactive', name='professional_status')
appointment_status = sa.Enum('scheduled', 'pending', 'completed', 'cancelled', name='appointment_status')


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        'services',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('description', sa.String(length=1000), nullable=False),
        sa.Column('price', sa.Numeric(precision=10, scale=2), nullable=False),
        sa.Column('duration', sa.Integer(), nullable=False, comment='Duration in minutes'),
        sa.CheckConstraint('price >= 0', name='service_price_non_negative'),
        sa.CheckConstraint('duration > 0', name='service_duration_positive'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_services_name', 'services', ['name'])

    op.create_table(
        'professionals',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False,
                  comment='Unique across active and inactive professionals'),
        sa.Column('phone', sa.String(length=20), nullable=False),
        sa.Column('status', professional_status, nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('email'),
    )
    op.create_index('ix_professionals_name', 'professionals', ['name'])
    op.create_index('ix_professionals_status', 'professionals', ['status'])

    op.create_table(
        'professional_services',
        sa.Column('professional_id', sa.Integer(), nullable=False),
        sa.Column('service_id', sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(['professional_id'], ['professionals.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['service_id'], ['services.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('professional_id', 'service_id'),
    )

    op.create_table(
        'appointments',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('client_name', sa.String(length=255), nullable=False),
        sa.Column('client_phone', sa.String(length=20), nullable=False),
        sa.Column('service_id', sa.Integer(), nullable=False),
        sa.Column('professional_id', sa.Integer(), nullable=True),
        sa.Column('appointment_date', sa.DateTime(timezone=False), nullable=False),
        sa.Column('status', appointment_status, nullable=False),
        sa.Column('total_value', sa.Numeric(precision=10, scale=2), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(['service_id'], ['services.id'], ondelete='RESTRICT'),
        sa.ForeignKeyConstraint(['professional_id'], ['professionals.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_appointments_service_id', 'appointments', ['service_id'])
    op.create_index('ix_appointments_professional_id', 'appointments', ['professional_id'])
    op.create_index('ix_appointments_appointment_date', 'appointments', ['appointment_date'])
    op.create_index('ix_appointments_status', 'appointments', ['status'])
    op.create_index(
        'uq_appointments_professional_slot',
        'appointments',
        ['appointment_date', 'professional_id'],
        unique=True,
        postgresql_where=sa.text("status <> 'cancelled'"),
        sqlite_where=sa.text("status <> 'cancelled'"),
    )


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_index('uq_appointments_professional_slot', table_name='appointments')
    op.drop_table('appointments')
    op.drop_table('professional_services')
    op.drop_table('professionals')
    op.drop_table('services')
    appointment_status.drop(op.get_bind(), checkfirst=True)
    professional_status.drop(op.get_bind(), checkfirst=True)
