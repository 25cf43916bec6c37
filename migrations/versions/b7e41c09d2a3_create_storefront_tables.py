"""create storefront tables (clients, app_credentials, user_doramas, admin_users)

Revision ID: b7e41c09d2a3
Revises:
Create Date: 2026-10-19 12:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision: str = 'b7e41c09d2a3'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        'clients',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('phone_number', sa.String(length=32), nullable=False),
        sa.Column('client_name', sa.String(length=255), nullable=True),
        sa.Column('client_password', sa.String(length=255), nullable=True),
        sa.Column('subscriptions', postgresql.JSONB(astext_type=sa.Text()), nullable=True),
        sa.Column('purchase_date', sa.TIMESTAMP(timezone=True), nullable=False),
        sa.Column('duration_months', sa.Integer(), nullable=False, server_default='1'),
        sa.Column('is_debtor', sa.Boolean(), nullable=False, server_default='false'),
        sa.Column('override_expiration', sa.Boolean(), nullable=False, server_default='false'),
        sa.Column('deleted', sa.Boolean(), nullable=False, server_default='false'),
        sa.Column('game_progress', postgresql.JSONB(astext_type=sa.Text()), nullable=True),
        sa.Column('created_at', sa.TIMESTAMP(timezone=True),
                  server_default=sa.text('now()'), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_clients_phone_number', 'clients', ['phone_number'])

    op.create_table(
        'app_credentials',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('service', sa.String(length=128), nullable=False),
        sa.Column('email', sa.Text(), nullable=False),
        sa.Column('password', sa.String(length=255), nullable=False),
        sa.Column('published_at', sa.TIMESTAMP(timezone=True), nullable=False),
        sa.Column('is_visible', sa.Boolean(), nullable=False, server_default='true'),
        sa.Column('created_at', sa.TIMESTAMP(timezone=True),
                  server_default=sa.text('now()'), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_app_credentials_service', 'app_credentials', ['service'])

    op.create_table(
        'user_doramas',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('phone_number', sa.String(length=32), nullable=False),
        sa.Column('title', sa.String(length=500), nullable=False),
        sa.Column('genre', sa.String(length=128), nullable=True),
        sa.Column('thumbnail', sa.Text(), nullable=True),
        sa.Column('status', sa.String(length=32), nullable=False),
        sa.Column('list_type', sa.String(length=32), nullable=True),
        sa.Column('episodes_watched', sa.Integer(), nullable=False),
        sa.Column('total_episodes', sa.Integer(), nullable=False),
        sa.Column('season', sa.Integer(), nullable=False),
        sa.Column('rating', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.TIMESTAMP(timezone=True),
                  server_default=sa.text('now()'), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_user_doramas_phone', 'user_doramas', ['phone_number'])

    op.create_table(
        'admin_users',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('username', sa.String(length=128), nullable=False),
        sa.Column('password_hash', sa.String(length=255), nullable=False),
        sa.Column('created_at', sa.TIMESTAMP(timezone=True),
                  server_default=sa.text('now()'), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('username'),
    )


def downgrade() -> None:
    op.drop_table('admin_users')
    op.drop_index('ix_user_doramas_phone', table_name='user_doramas')
    op.drop_table('user_doramas')
    op.drop_index('ix_app_credentials_service', table_name='app_credentials')
    op.drop_table('app_credentials')
    op.drop_index('ix_clients_phone_number', table_name='clients')
    op.drop_table('clients')
