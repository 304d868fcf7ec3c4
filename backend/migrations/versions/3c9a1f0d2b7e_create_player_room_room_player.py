"""create player, room and room_player tables

Revision ID: 3c9a1f0d2b7e
Revises:
Create Date: 2026-10-19 00:00:00
"""

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '3c9a1f0d2b7e'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    bind = op.get_bind()
    insp = sa.inspect(bind)
    existing_tables = set(insp.get_table_names())

    if 'player' not in existing_tables:
        op.create_table(
            'player',
            sa.Column('id', sa.Integer(), primary_key=True),
            sa.Column('first_name', sa.String(length=64), nullable=False),
            sa.Column('last_name', sa.String(length=64), nullable=False),
            sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        )

    if 'room' not in existing_tables:
        op.create_table(
            'room',
            sa.Column('id', sa.Integer(), primary_key=True),
            sa.Column('code', sa.String(length=16), nullable=False),
            sa.Column('owner_id', sa.Integer(), sa.ForeignKey('player.id'), nullable=False),
            sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        )
        op.create_index('ix_room_code', 'room', ['code'], unique=True)

    if 'room_player' not in existing_tables:
        op.create_table(
            'room_player',
            sa.Column('id', sa.Integer(), primary_key=True),
            sa.Column('player_id', sa.Integer(), sa.ForeignKey('player.id'), nullable=False),
            sa.Column('room_id', sa.Integer(), sa.ForeignKey('room.id'), nullable=False),
            sa.Column('is_owner', sa.Boolean(), nullable=False, server_default=sa.false()),
            sa.Column('joined_at', sa.DateTime(timezone=True), nullable=False),
            sa.UniqueConstraint('player_id', 'room_id', name='uq_room_player_player_room'),
        )


def downgrade():
    op.drop_table('room_player')
    op.drop_index('ix_room_code', table_name='room')
    op.drop_table('room')
    op.drop_table('player')
