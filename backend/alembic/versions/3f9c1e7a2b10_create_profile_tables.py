"""create profiles, repositories and analysis_results tables

Revision ID: 3f9c1e7a2b10
Revises:
Create Date: 2026-10-18 12:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '3f9c1e7a2b10'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table('profiles',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('username', sa.String(length=39), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=True),
        sa.Column('avatar_url', sa.String(length=512), nullable=False),
        sa.Column('bio', sa.Text(), nullable=True),
        sa.Column('location', sa.String(length=255), nullable=True),
        sa.Column('public_repos', sa.Integer(), nullable=False),
        sa.Column('followers', sa.Integer(), nullable=False),
        sa.Column('following', sa.Integer(), nullable=False),
        sa.Column('profile_url', sa.String(length=512), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('last_refreshed_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('fetch_generation', sa.String(length=32), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )
    with op.batch_alter_table('profiles', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_profiles_username'), ['username'], unique=True)
        batch_op.create_index(batch_op.f('ix_profiles_last_refreshed_at'), ['last_refreshed_at'], unique=False)

    op.create_table('repositories',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('github_id', sa.BigInteger(), nullable=False),
        sa.Column('profile_id', sa.Uuid(), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('full_name', sa.String(length=512), nullable=False),
        sa.Column('html_url', sa.String(length=512), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('language', sa.String(length=100), nullable=True),
        sa.Column('stargazers_count', sa.Integer(), nullable=False),
        sa.Column('forks_count', sa.Integer(), nullable=False),
        sa.Column('watchers_count', sa.Integer(), nullable=False),
        sa.Column('size', sa.Integer(), nullable=False),
        sa.Column('topics', sa.JSON(), nullable=False),
        sa.Column('license', sa.JSON(), nullable=True),
        sa.Column('is_fork', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('fetch_generation', sa.String(length=32), nullable=False),
        sa.ForeignKeyConstraint(['profile_id'], ['profiles.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )
    with op.batch_alter_table('repositories', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_repositories_github_id'), ['github_id'], unique=True)
        batch_op.create_index(batch_op.f('ix_repositories_profile_id'), ['profile_id'], unique=False)
        batch_op.create_index(batch_op.f('ix_repositories_language'), ['language'], unique=False)

    op.create_table('analysis_results',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('profile_id', sa.Uuid(), nullable=False),
        sa.Column('total_stars', sa.Integer(), nullable=False),
        sa.Column('total_forks', sa.Integer(), nullable=False),
        sa.Column('total_watchers', sa.Integer(), nullable=False),
        sa.Column('total_size', sa.Integer(), nullable=False),
        sa.Column('repo_count', sa.Integer(), nullable=False),
        sa.Column('original_repo_count', sa.Integer(), nullable=False),
        sa.Column('forked_repo_count', sa.Integer(), nullable=False),
        sa.Column('average_stars_per_repo', sa.Integer(), nullable=False),
        sa.Column('top_languages', sa.JSON(), nullable=False),
        sa.Column('language_breakdown', sa.JSON(), nullable=False),
        sa.Column('top_topics', sa.JSON(), nullable=False),
        sa.Column('topic_breakdown', sa.JSON(), nullable=False),
        sa.Column('most_starred_repo', sa.JSON(), nullable=False),
        sa.Column('most_forked_repo', sa.JSON(), nullable=False),
        sa.Column('recent_repositories', sa.JSON(), nullable=False),
        sa.Column('analysis_date', sa.DateTime(timezone=True), nullable=False),
        sa.Column('fetch_generation', sa.String(length=32), nullable=False),
        sa.ForeignKeyConstraint(['profile_id'], ['profiles.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )
    with op.batch_alter_table('analysis_results', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_analysis_results_profile_id'), ['profile_id'], unique=True)
        batch_op.create_index(batch_op.f('ix_analysis_results_total_stars'), ['total_stars'], unique=False)
        batch_op.create_index(batch_op.f('ix_analysis_results_analysis_date'), ['analysis_date'], unique=False)


def downgrade() -> None:
    with op.batch_alter_table('analysis_results', schema=None) as batch_op:
        batch_op.drop_index(batch_op.f('ix_analysis_results_analysis_date'))
        batch_op.drop_index(batch_op.f('ix_analysis_results_total_stars'))
        batch_op.drop_index(batch_op.f('ix_analysis_results_profile_id'))
    op.drop_table('analysis_results')

    with op.batch_alter_table('repositories', schema=None) as batch_op:
        batch_op.drop_index(batch_op.f('ix_repositories_language'))
        batch_op.drop_index(batch_op.f('ix_repositories_profile_id'))
        batch_op.drop_index(batch_op.f('ix_repositories_github_id'))
    op.drop_table('repositories')

    with op.batch_alter_table('profiles', schema=None) as batch_op:
        batch_op.drop_index(batch_op.f('ix_profiles_last_refreshed_at'))
        batch_op.drop_index(batch_op.f('ix_profiles_username'))
    op.drop_table('profiles')
