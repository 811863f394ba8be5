"""lantern hacks, rooms, messages and doc files

Revision ID: 0002_hacks_rooms_doc_files
Revises: 0001_initial
Create Date: 2026-10-19
"""
from alembic import op
import sqlalchemy as sa

revision = "0002_hacks_rooms_doc_files"
down_revision = "0001_initial"
branch_labels = None
depends_on = None


def _timestamps():
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("CURRENT_TIMESTAMP"), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("CURRENT_TIMESTAMP"), nullable=False),
    ]


def _access_columns():
    return [
        sa.Column("owner_id", sa.String(36), nullable=True),
        sa.Column("owner_alias_id", sa.String(36), nullable=True),
        sa.Column("team_id", sa.String(36), nullable=True),
        sa.Column("custom_time_created", sa.DateTime(timezone=True), nullable=True),
        sa.Column("custom_last_updated", sa.DateTime(timezone=True), nullable=True),
        sa.Column("visibility", sa.Integer, nullable=False, server_default="0"),
        sa.Column("access_level", sa.Integer, nullable=False, server_default="0"),
        sa.Column("is_public", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("user_ids", sa.JSON, nullable=False),
        sa.Column("team_ids", sa.JSON, nullable=False),
        sa.Column("user_admin_ids", sa.JSON, nullable=False),
        sa.Column("team_admin_ids", sa.JSON, nullable=False),
        sa.Column("banned_ids", sa.JSON, nullable=False),
    ]


def _access_table(name, *columns):
    op.create_table(name, *columns, *_access_columns(), *_timestamps())
    op.create_index(f"ix_{name}_owner_id", name, ["owner_id"], unique=False)


def upgrade():
    op.create_table(
        "lantern_hacks",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("owner_id", sa.String(36), nullable=False),
        sa.Column("station_id", sa.Integer, nullable=False),
        sa.Column("tries_left", sa.Integer, nullable=False, server_default="3"),
        sa.Column("done", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("was_successful", sa.Boolean, nullable=True),
        sa.Column("game_users", sa.JSON, nullable=False),
        *_timestamps(),
    )
    op.create_index("ix_lantern_hacks_owner_id", "lantern_hacks", ["owner_id"], unique=True)

    op.create_table(
        "game_users",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("user_name", sa.String(64), nullable=False, unique=True),
        sa.Column("station_id", sa.Integer, nullable=True),
        sa.Column("passwords", sa.JSON, nullable=False),
        *_timestamps(),
    )
    op.create_index("ix_game_users_station_id", "game_users", ["station_id"], unique=False)

    op.create_table(
        "fake_passwords",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("password", sa.String(64), nullable=False, unique=True),
        *_timestamps(),
    )

    _access_table(
        "rooms",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("room_name", sa.String(255), nullable=False, unique=True),
        sa.Column("room_name_lower_case", sa.String(255), nullable=False),
        sa.Column("password", sa.String(255), nullable=True),
        sa.Column("participant_ids", sa.JSON, nullable=False),
        sa.Column("followers", sa.JSON, nullable=False),
        sa.Column("name_is_locked", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("is_anonymous", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("is_whisper", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("is_system_room", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("is_user", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("is_team", sa.Boolean, nullable=False, server_default=sa.false()),
    )
    op.create_index("ix_rooms_room_name_lower_case", "rooms", ["room_name_lower_case"], unique=True)

    _access_table(
        "messages",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("room_id", sa.String(36), nullable=False),
        sa.Column("message_type", sa.String(16), nullable=False, server_default="chat"),
        sa.Column("text", sa.JSON, nullable=False),
        sa.Column("image", sa.JSON, nullable=True),
    )
    op.create_index("ix_messages_room_id", "messages", ["room_id"], unique=False)

    _access_table(
        "doc_files",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("code", sa.String(32), nullable=False),
        sa.Column("title", sa.String(255), nullable=False, unique=True),
        sa.Column("text", sa.JSON, nullable=False),
        sa.Column("video_codes", sa.JSON, nullable=False),
        sa.Column("images", sa.JSON, nullable=False),
    )
    op.create_index("ix_doc_files_code", "doc_files", ["code"], unique=True)


def downgrade():
    op.drop_table("doc_files")
    op.drop_table("messages")
    op.drop_table("rooms")
    op.drop_table("fake_passwords")
    op.drop_table("game_users")
    op.drop_table("lantern_hacks")
