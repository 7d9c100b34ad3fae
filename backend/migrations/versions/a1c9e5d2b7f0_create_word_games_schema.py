"""create user, game_template, game and leaderboard tables

Revision ID: a1c9e5d2b7f0
Revises:
Create Date: 2026-10-19 09:00:00.000000

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = 'a1c9e5d2b7f0'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    bind = op.get_bind()
    insp = sa.inspect(bind)
    existing_tables = set(insp.get_table_names())

    if 'user' not in existing_tables:
        op.create_table(
            'user',
            sa.Column('id', sa.String(length=36), primary_key=True),
            sa.Column('username', sa.String(length=64), nullable=False),
            sa.Column('password_hash', sa.String(length=256), nullable=False),
            sa.Column('role', sa.String(length=32), nullable=False, server_default='USER'),
            sa.Column('total_game_played', sa.Integer(), nullable=False, server_default='0'),
            sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        )
        op.create_index('ix_user_username', 'user', ['username'], unique=True)

    if 'game_template' not in existing_tables:
        op.create_table(
            'game_template',
            sa.Column('id', sa.String(length=36), primary_key=True),
            sa.Column('slug', sa.String(length=64), nullable=False),
            sa.Column('name', sa.String(length=128), nullable=False),
        )
        op.create_index('ix_game_template_slug', 'game_template', ['slug'], unique=True)

    if 'game' not in existing_tables:
        op.create_table(
            'game',
            sa.Column('id', sa.String(length=36), primary_key=True),
            sa.Column('game_template_id', sa.String(length=36), sa.ForeignKey('game_template.id'), nullable=False),
            sa.Column('creator_id', sa.String(length=36), sa.ForeignKey('user.id'), nullable=False),
            sa.Column('name', sa.String(length=128), nullable=False, unique=True),
            sa.Column('description', sa.String(length=256), nullable=True),
            sa.Column('thumbnail_image', sa.String(length=512), nullable=True),
            sa.Column('is_published', sa.Boolean(), nullable=False, server_default=sa.false()),
            sa.Column('total_played', sa.Integer(), nullable=False, server_default='0'),
            sa.Column('game_json', sa.JSON(), nullable=False),
            sa.Column('revision', sa.Integer(), nullable=False, server_default='1'),
            sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
            sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        )
        op.create_index('ix_game_creator_id', 'game', ['creator_id'])

    if 'leaderboard' not in existing_tables:
        op.create_table(
            'leaderboard',
            sa.Column('id', sa.String(length=36), primary_key=True),
            sa.Column('game_id', sa.String(length=36), sa.ForeignKey('game.id', ondelete='CASCADE'), nullable=False),
            sa.Column('user_id', sa.String(length=36), sa.ForeignKey('user.id', ondelete='SET NULL'), nullable=True),
            sa.Column('score', sa.Integer(), nullable=False),
            sa.Column('time_taken', sa.Integer(), nullable=True),
            sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        )
        op.create_index('ix_leaderboard_game_id', 'leaderboard', ['game_id'])
        op.create_index('ix_leaderboard_user_id', 'leaderboard', ['user_id'])
        op.create_index('ix_leaderboard_ranking', 'leaderboard', ['game_id', 'score', 'time_taken'])


def downgrade():
    op.drop_table('leaderboard')
    op.drop_table('game')
    op.drop_table('game_template')
    op.drop_table('user')
