"""create_chat_tables

Revision ID: 3c1f0a7d2b64
Revises:
Create Date: 2026-10-19 09:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '3c1f0a7d2b64'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('name', sa.String(length=100), nullable=True, comment='姓名'),
        sa.Column('phone', sa.String(length=20), nullable=True, comment='手机号'),
        sa.Column('profile_photo', sa.String(length=1024), nullable=True, comment='头像URL'),
        sa.Column('role', sa.String(length=20), nullable=True, comment='角色：seeker/provider/admin'),
        sa.Column('kyc_status', sa.String(length=20), nullable=False, server_default='none', comment='KYC状态：none/pending/verified/rejected'),
        sa.Column('kyc_verified_at', sa.DateTime(timezone=True), nullable=True, comment='KYC通过时间'),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_users_id', 'users', ['id'], unique=False)
    op.create_index('ix_users_phone', 'users', ['phone'], unique=False)

    op.create_table(
        'messages',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('sender_id', sa.Integer(), nullable=False, comment='发送者ID'),
        sa.Column('receiver_id', sa.Integer(), nullable=False, comment='接收者ID'),
        sa.Column('message', sa.Text(), nullable=False, comment='消息内容'),
        sa.Column('read', sa.Boolean(), nullable=False, server_default='false', comment='是否已读'),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.ForeignKeyConstraint(['sender_id'], ['users.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['receiver_id'], ['users.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_messages_id', 'messages', ['id'], unique=False)
    op.create_index('ix_messages_pair_created', 'messages', ['sender_id', 'receiver_id', 'created_at'], unique=False)
    op.create_index('ix_messages_receiver_unread', 'messages', ['receiver_id', 'read'], unique=False)

    op.create_table(
        'blocked_users',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False, comment='发起屏蔽的用户'),
        sa.Column('target_id', sa.Integer(), nullable=False, comment='被屏蔽的用户'),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_blocked_users_id', 'blocked_users', ['id'], unique=False)
    op.create_index('ix_blocked_users_pair', 'blocked_users', ['user_id', 'target_id'], unique=False)
    op.create_index('ix_blocked_users_target', 'blocked_users', ['target_id'], unique=False)

    op.create_table(
        'reports',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('reporter_id', sa.Integer(), nullable=False, comment='举报人'),
        sa.Column('target_id', sa.Integer(), nullable=False, comment='被举报人'),
        sa.Column('reason', sa.Text(), nullable=True, comment='举报原因'),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_reports_id', 'reports', ['id'], unique=False)
    op.create_index('ix_reports_reporter_id', 'reports', ['reporter_id'], unique=False)
    op.create_index('ix_reports_target_id', 'reports', ['target_id'], unique=False)


def downgrade() -> None:
    op.drop_table('reports')
    op.drop_table('blocked_users')
    op.drop_index('ix_messages_receiver_unread', table_name='messages')
    op.drop_index('ix_messages_pair_created', table_name='messages')
    op.drop_table('messages')
    op.drop_table('users')
