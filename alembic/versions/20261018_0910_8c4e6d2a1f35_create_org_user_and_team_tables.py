"""create_org_user_and_team_tables

Revision ID: 8c4e6d2a1f35
Revises: 3f1a2b7c9d01
Create Date: 2026-10-18 09:10:00

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '8c4e6d2a1f35'
down_revision: Union[str, None] = '3f1a2b7c9d01'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create org_user, team, team_user and team_repo tables."""
    op.create_table(
        'org_user',
        sa.Column('id', sa.BigInteger(), primary_key=True, autoincrement=True),
        sa.Column('uid', sa.BigInteger(), sa.ForeignKey('user.id', ondelete='CASCADE'), nullable=False),
        sa.Column('org_id', sa.BigInteger(), sa.ForeignKey('user.id', ondelete='CASCADE'), nullable=False),
        sa.Column('is_public', sa.Boolean(), nullable=False, server_default=sa.text('false')),
        sa.Column('is_owner', sa.Boolean(), nullable=False, server_default=sa.text('false')),
        sa.Column('num_teams', sa.Integer(), nullable=False, server_default=sa.text('0')),
        sa.UniqueConstraint('uid', 'org_id', name='org_user_user_org_unique'),
    )
    op.create_index('ix_org_user_uid', 'org_user', ['uid'])
    op.create_index('ix_org_user_org_id', 'org_user', ['org_id'])

    op.create_table(
        'team',
        sa.Column('id', sa.BigInteger(), primary_key=True, autoincrement=True),
        sa.Column('org_id', sa.BigInteger(), sa.ForeignKey('user.id', ondelete='CASCADE'), nullable=False),
        sa.Column('lower_name', sa.String(length=255), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('description', sa.String(length=255), nullable=False, server_default=''),
        sa.Column('authorize', sa.Integer(), nullable=False, server_default=sa.text('1')),
        sa.Column('num_repos', sa.Integer(), nullable=False, server_default=sa.text('0')),
        sa.Column('num_members', sa.Integer(), nullable=False, server_default=sa.text('0')),
        sa.UniqueConstraint('org_id', 'lower_name', name='team_org_name_unique'),
    )
    op.create_index('ix_team_org_id', 'team', ['org_id'])

    op.create_table(
        'team_user',
        sa.Column('id', sa.BigInteger(), primary_key=True, autoincrement=True),
        sa.Column('org_id', sa.BigInteger(), nullable=False),
        sa.Column('team_id', sa.BigInteger(), sa.ForeignKey('team.id', ondelete='CASCADE'), nullable=False),
        sa.Column('uid', sa.BigInteger(), sa.ForeignKey('user.id', ondelete='CASCADE'), nullable=False),
        sa.UniqueConstraint('team_id', 'uid', name='team_user_team_user_unique'),
    )
    op.create_index('ix_team_user_org_id', 'team_user', ['org_id'])
    op.create_index('ix_team_user_uid', 'team_user', ['uid'])

    op.create_table(
        'team_repo',
        sa.Column('id', sa.BigInteger(), primary_key=True, autoincrement=True),
        sa.Column('org_id', sa.BigInteger(), nullable=False),
        sa.Column('team_id', sa.BigInteger(), sa.ForeignKey('team.id', ondelete='CASCADE'), nullable=False),
        sa.Column('repo_id', sa.BigInteger(), sa.ForeignKey('repository.id', ondelete='CASCADE'), nullable=False),
        sa.UniqueConstraint('team_id', 'repo_id', name='team_repo_team_repo_unique'),
    )
    op.create_index('ix_team_repo_org_id', 'team_repo', ['org_id'])
    op.create_index('ix_team_repo_repo_id', 'team_repo', ['repo_id'])


def downgrade() -> None:
    """Drop org_user, team, team_user and team_repo tables."""
    op.drop_index('ix_team_repo_repo_id', table_name='team_repo')
    op.drop_index('ix_team_repo_org_id', table_name='team_repo')
    op.drop_table('team_repo')
    op.drop_index('ix_team_user_uid', table_name='team_user')
    op.drop_index('ix_team_user_org_id', table_name='team_user')
    op.drop_table('team_user')
    op.drop_index('ix_team_org_id', table_name='team')
    op.drop_table('team')
    op.drop_index('ix_org_user_org_id', table_name='org_user')
    op.drop_index('ix_org_user_uid', table_name='org_user')
    op.drop_table('org_user')
