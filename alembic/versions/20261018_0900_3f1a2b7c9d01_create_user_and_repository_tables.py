"""create_user_and_repository_tables

Revision ID: 3f1a2b7c9d01
Revises:
Create Date: 2026-10-18 09:00:00

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '3f1a2b7c9d01'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create user, repository, watch and access tables."""
    op.create_table(
        'user',
        sa.Column('id', sa.BigInteger(), primary_key=True, autoincrement=True),
        sa.Column('type', sa.Integer(), nullable=False, server_default=sa.text('0')),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('lower_name', sa.String(length=255), nullable=False),
        sa.Column('full_name', sa.String(length=255), nullable=False, server_default=''),
        sa.Column('email', sa.String(length=255), nullable=False, server_default=''),
        sa.Column('num_members', sa.Integer(), nullable=False, server_default=sa.text('0')),
        sa.Column('num_teams', sa.Integer(), nullable=False, server_default=sa.text('0')),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index('ix_user_lower_name', 'user', ['lower_name'], unique=True)
    op.create_index('ix_user_type', 'user', ['type'])

    op.create_table(
        'repository',
        sa.Column('id', sa.BigInteger(), primary_key=True, autoincrement=True),
        sa.Column('owner_id', sa.BigInteger(), sa.ForeignKey('user.id', ondelete='CASCADE'), nullable=False),
        sa.Column('lower_name', sa.String(length=255), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('description', sa.String(length=512), nullable=False, server_default=''),
        sa.Column('is_private', sa.Boolean(), nullable=False, server_default=sa.text('false')),
        sa.Column('is_unlisted', sa.Boolean(), nullable=False, server_default=sa.text('false')),
        sa.Column('num_watches', sa.Integer(), nullable=False, server_default=sa.text('0')),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.UniqueConstraint('owner_id', 'lower_name', name='repository_owner_name_unique'),
    )
    op.create_index('ix_repository_owner_id', 'repository', ['owner_id'])
    op.create_index('idx_repository_owner_updated', 'repository', ['owner_id', 'updated_at'])

    op.create_table(
        'watch',
        sa.Column('id', sa.BigInteger(), primary_key=True, autoincrement=True),
        sa.Column('user_id', sa.BigInteger(), sa.ForeignKey('user.id', ondelete='CASCADE'), nullable=False),
        sa.Column('repo_id', sa.BigInteger(), sa.ForeignKey('repository.id', ondelete='CASCADE'), nullable=False),
        sa.UniqueConstraint('user_id', 'repo_id', name='watch_user_repo_unique'),
    )
    op.create_index('ix_watch_repo_id', 'watch', ['repo_id'])

    op.create_table(
        'access',
        sa.Column('id', sa.BigInteger(), primary_key=True, autoincrement=True),
        sa.Column('user_id', sa.BigInteger(), sa.ForeignKey('user.id', ondelete='CASCADE'), nullable=False),
        sa.Column('repo_id', sa.BigInteger(), sa.ForeignKey('repository.id', ondelete='CASCADE'), nullable=False),
        sa.Column('mode', sa.Integer(), nullable=False, server_default=sa.text('0')),
        sa.UniqueConstraint('user_id', 'repo_id', name='access_user_repo_unique'),
    )
    op.create_index('ix_access_repo_id', 'access', ['repo_id'])


def downgrade() -> None:
    """Drop user, repository, watch and access tables."""
    op.drop_index('ix_access_repo_id', table_name='access')
    op.drop_table('access')
    op.drop_index('ix_watch_repo_id', table_name='watch')
    op.drop_table('watch')
    op.drop_index('idx_repository_owner_updated', table_name='repository')
    op.drop_index('ix_repository_owner_id', table_name='repository')
    op.drop_table('repository')
    op.drop_index('ix_user_type', table_name='user')
    op.drop_index('ix_user_lower_name', table_name='user')
    op.drop_table('user')
