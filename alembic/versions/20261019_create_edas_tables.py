"""Create user and EDAS workflow tables

Revision ID: 20261019_edas
Revises:
Create Date: 2026-10-19

Tables:
- user: API kullanıcıları (admin / manager / user)
- edas_notification: AYEDAŞ / BEDAŞ bildirimleri
- edas_step: Bildirim adımları (bildirim + adım tipi benzersiz)
- edas_document: Adımlara yüklenen belgeler
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


revision: str = '20261019_edas'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=False),
    ]


def upgrade() -> None:
    # === USER TABLE ===
    op.create_table('user',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('hashed_password', sa.String(255), nullable=False),
        sa.Column('full_name', sa.String(255), nullable=True),
        sa.Column('role', sa.String(20), nullable=False, server_default='user'),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('last_login', sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id', name='pk_user'),
    )
    op.create_index('ix_user_email', 'user', ['email'], unique=True)

    # === EDAS NOTIFICATION TABLE ===
    op.create_table('edas_notification',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('ref_no', sa.String(100), nullable=False),
        sa.Column('company', sa.String(20), nullable=False),
        sa.Column('application_type', sa.String(100), nullable=False),
        sa.Column('customer_name', sa.String(255), nullable=False),
        sa.Column('project_name', sa.String(255), nullable=True),
        sa.Column('city', sa.String(100), nullable=True),
        sa.Column('district', sa.String(100), nullable=True),
        sa.Column('parcel_block', sa.String(50), nullable=True),
        sa.Column('parcel_no', sa.String(50), nullable=True),
        sa.Column('current_step', sa.String(50), nullable=False),
        sa.Column('status', sa.String(20), nullable=False, server_default='PENDING'),
        sa.Column('created_by_id', sa.Uuid(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(['created_by_id'], ['user.id'], name='fk_edas_notification_created_by_id_user', ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id', name='pk_edas_notification'),
    )
    op.create_index('ix_edas_notification_ref_no', 'edas_notification', ['ref_no'], unique=True)
    op.create_index('ix_edas_notification_status', 'edas_notification', ['status'], unique=False)
    op.create_index('idx_edas_notification_company_status', 'edas_notification', ['company', 'status'], unique=False)

    # === EDAS STEP TABLE ===
    op.create_table('edas_step',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('notification_id', sa.Uuid(), nullable=False),
        sa.Column('step_type', sa.String(50), nullable=False),
        sa.Column('status', sa.String(20), nullable=False, server_default='PENDING'),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('ref_no', sa.String(100), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(['notification_id'], ['edas_notification.id'], name='fk_edas_step_notification_id_edas_notification', ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id', name='pk_edas_step'),
        sa.UniqueConstraint('notification_id', 'step_type', name='uq_edas_step_notification_step_type'),
    )
    op.create_index('ix_edas_step_notification_id', 'edas_step', ['notification_id'], unique=False)

    # === EDAS DOCUMENT TABLE ===
    op.create_table('edas_document',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('step_id', sa.Uuid(), nullable=False),
        sa.Column('path', sa.String(500), nullable=False),
        sa.Column('mime_type', sa.String(150), nullable=False),
        sa.Column('original_name', sa.String(255), nullable=False),
        sa.Column('file_size', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('document_type', sa.String(255), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(['step_id'], ['edas_step.id'], name='fk_edas_document_step_id_edas_step', ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id', name='pk_edas_document'),
    )
    op.create_index('ix_edas_document_step_id', 'edas_document', ['step_id'], unique=False)


def downgrade() -> None:
    op.drop_index('ix_edas_document_step_id', table_name='edas_document')
    op.drop_table('edas_document')
    op.drop_index('ix_edas_step_notification_id', table_name='edas_step')
    op.drop_table('edas_step')
    op.drop_index('idx_edas_notification_company_status', table_name='edas_notification')
    op.drop_index('ix_edas_notification_status', table_name='edas_notification')
    op.drop_index('ix_edas_notification_ref_no', table_name='edas_notification')
    op.drop_table('edas_notification')
    op.drop_index('ix_user_email', table_name='user')
    op.drop_table('user')
