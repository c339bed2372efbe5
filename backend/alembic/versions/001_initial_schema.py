"""Initial CRM schema: agencies, users, clients, policies, activities, documents, notes

Revision ID: 001_initial_schema
Revises: None
Create Date: 2026-10-17
"""
from alembic import op
import sqlalchemy as sa

revision = '001_initial_schema'
down_revision = None
branch_labels = None
depends_on = None


def _timestamps():
    return [
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
    ]


def _agency_fk():
    return sa.Column(
        'agency_id', sa.String(36),
        sa.ForeignKey('agencies.id', ondelete='CASCADE'), nullable=False, index=True,
    )


def upgrade():
    op.create_table(
        'agencies',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('timezone', sa.String(), nullable=False, server_default='America/Chicago'),
        *_timestamps(),
    )

    op.create_table(
        'users',
        sa.Column('id', sa.String(36), primary_key=True),
        _agency_fk(),
        sa.Column('email', sa.String(), nullable=False, unique=True, index=True),
        sa.Column('hashed_password', sa.String(), nullable=False),
        sa.Column('full_name', sa.String(), nullable=True),
        sa.Column('role', sa.String(), nullable=False, server_default='agent'),
        sa.Column('is_active', sa.Boolean(), server_default=sa.true()),
        *_timestamps(),
    )

    op.create_table(
        'clients',
        sa.Column('id', sa.String(36), primary_key=True),
        _agency_fk(),
        sa.Column('first_name', sa.String(100), nullable=False, index=True),
        sa.Column('last_name', sa.String(100), nullable=False, index=True),
        sa.Column('email', sa.String(), nullable=True, index=True),
        sa.Column('phone', sa.String(20), nullable=True),
        sa.Column('address', sa.Text(), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        *_timestamps(),
        sa.UniqueConstraint('agency_id', 'email', name='uq_clients_agency_email'),
    )

    op.create_table(
        'policies',
        sa.Column('id', sa.String(36), primary_key=True),
        _agency_fk(),
        sa.Column('client_id', sa.String(36), sa.ForeignKey('clients.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('carrier', sa.String(255), nullable=False, index=True),
        sa.Column('policy_number', sa.String(100), nullable=False, index=True),
        sa.Column('type', sa.String(), nullable=False, index=True),
        sa.Column('status', sa.String(), nullable=False, server_default='active', index=True),
        sa.Column('effective_date', sa.Date(), nullable=False),
        sa.Column('expiration_date', sa.Date(), nullable=False, index=True),
        sa.Column('premium', sa.Numeric(12, 2), nullable=False, server_default='0'),
        sa.Column('details', sa.JSON(), nullable=True),
        *_timestamps(),
    )

    op.create_table(
        'activities',
        sa.Column('id', sa.String(36), primary_key=True),
        _agency_fk(),
        sa.Column('type', sa.String(), nullable=False, index=True),
        sa.Column('description', sa.Text(), nullable=False),
        sa.Column('client_id', sa.String(36), sa.ForeignKey('clients.id', ondelete='SET NULL'), nullable=True, index=True),
        sa.Column('policy_id', sa.String(36), sa.ForeignKey('policies.id', ondelete='SET NULL'), nullable=True, index=True),
        sa.Column('due_date', sa.DateTime(timezone=True), nullable=True, index=True),
        sa.Column('completed', sa.Boolean(), nullable=False, server_default=sa.false(), index=True),
        sa.Column('completed_at', sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
    )

    op.create_table(
        'documents',
        sa.Column('id', sa.String(36), primary_key=True),
        _agency_fk(),
        sa.Column('client_id', sa.String(36), sa.ForeignKey('clients.id', ondelete='SET NULL'), nullable=True, index=True),
        sa.Column('policy_id', sa.String(36), sa.ForeignKey('policies.id', ondelete='SET NULL'), nullable=True, index=True),
        sa.Column('file_name', sa.String(255), nullable=False),
        sa.Column('file_path', sa.String(), nullable=False),
        sa.Column('file_size', sa.BigInteger(), nullable=True),
        sa.Column('mime_type', sa.String(100), nullable=True),
        sa.Column('uploaded_at', sa.DateTime(timezone=True), server_default=sa.func.now(), index=True),
    )

    op.create_table(
        'client_notes',
        sa.Column('id', sa.String(36), primary_key=True),
        _agency_fk(),
        sa.Column('client_id', sa.String(36), sa.ForeignKey('clients.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('content', sa.Text(), nullable=False),
        *_timestamps(),
    )
    op.create_index('ix_client_notes_created_at', 'client_notes', ['created_at'])
    op.create_index('ix_clients_created_at', 'clients', ['created_at'])
    op.create_index('ix_policies_created_at', 'policies', ['created_at'])


def downgrade():
    for table in ('client_notes', 'documents', 'activities', 'policies', 'clients', 'users', 'agencies'):
        op.drop_table(table)
