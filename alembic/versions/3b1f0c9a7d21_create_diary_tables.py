"""create users and diary tables

Revision ID: 3b1f0c9a7d21
Revises:
Create Date: 2026-10-19 10:02:11.418230

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '3b1f0c9a7d21'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        'users',
        sa.Column('id', sa.String(), primary_key=True),
        sa.Column('username', sa.String(), nullable=False),
        sa.Column('hashed_password', sa.String(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index('ix_users_username', 'users', ['username'], unique=True)

    op.create_table(
        'diaries',
        sa.Column('id', sa.String(), primary_key=True),
        sa.Column('user_id', sa.String(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('title', sa.String(), nullable=False),
        sa.Column('content', sa.Text(), nullable=False),
        sa.Column('mood', sa.String(), nullable=False),
        sa.Column('weather', sa.String(), nullable=False),
        sa.Column('diary_date', sa.Date(), nullable=False),
        sa.Column('state', sa.String(), nullable=False),
        sa.Column('latitude', sa.Float(), nullable=False),
        sa.Column('longitude', sa.Float(), nullable=False),
        sa.Column('thumbnail_url', sa.String()),
        sa.Column('is_public', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index('ix_diaries_user_id', 'diaries', ['user_id'])
    op.create_index('ix_diaries_state', 'diaries', ['state'])
    op.create_index('ix_diaries_is_public', 'diaries', ['is_public'])
    op.create_index('ix_diaries_created_at', 'diaries', ['created_at'])

    op.create_table(
        'diary_images',
        sa.Column('id', sa.String(), primary_key=True),
        sa.Column('diary_id', sa.String(), sa.ForeignKey('diaries.id', ondelete='CASCADE'), nullable=False),
        sa.Column('position', sa.Integer(), nullable=False),
        sa.Column('url', sa.String(), nullable=False),
        sa.Column('storage_handle', sa.String(), nullable=False),
    )
    op.create_index('ix_diary_images_diary_id', 'diary_images', ['diary_id'])

    op.create_table(
        'diary_comments',
        sa.Column('id', sa.String(), primary_key=True),
        sa.Column('diary_id', sa.String(), sa.ForeignKey('diaries.id', ondelete='CASCADE'), nullable=False),
        sa.Column('user_id', sa.String(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('content', sa.Text(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index('ix_diary_comments_diary_id', 'diary_comments', ['diary_id'])

    op.create_table(
        'diary_likes',
        sa.Column('diary_id', sa.String(), sa.ForeignKey('diaries.id', ondelete='CASCADE'), primary_key=True),
        sa.Column('user_id', sa.String(), sa.ForeignKey('users.id', ondelete='CASCADE'), primary_key=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
    )


def downgrade() -> None:
    # 역순 삭제
    op.drop_table('diary_likes')
    op.drop_index('ix_diary_comments_diary_id')
    op.drop_table('diary_comments')
    op.drop_index('ix_diary_images_diary_id')
    op.drop_table('diary_images')
    op.drop_index('ix_diaries_created_at')
    op.drop_index('ix_diaries_is_public')
    op.drop_index('ix_diaries_state')
    op.drop_index('ix_diaries_user_id')
    op.drop_table('diaries')
    op.drop_index('ix_users_username')
    op.drop_table('users')
