"""initial

Revision ID: 0001_initial
Revises:
Create Date: 2026-10-19
"""
from alembic import op
import sqlalchemy as sa

revision = "0001_initial"
down_revision = None
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
    _access_table(
        "users",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("username", sa.String(64), nullable=False),
        sa.Column("email", sa.String(255), nullable=True, unique=True),
        sa.Column("full_name", sa.String(255), nullable=True),
        sa.Column("hashed_password", sa.String(255), nullable=False),
        sa.Column("is_verified", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("is_banned", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("has_full_access", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("part_of_teams", sa.JSON, nullable=False),
        sa.Column("followed_rooms", sa.JSON, nullable=False),
        sa.Column("verification_token", sa.String(128), nullable=True),
        sa.Column("verification_token_expires_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_users_username", "users", ["username"], unique=True)
    op.create_index("ix_users_verification_token", "users", ["verification_token"], unique=False)
    op.create_index("ix_users_access_level_banned", "users", ["access_level", "is_banned"], unique=False)

    _access_table(
        "aliases",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("alias_name", sa.String(64), nullable=False),
        sa.Column("full_name", sa.String(255), nullable=True),
        sa.Column("is_verified", sa.Boolean, nullable=False, server_default=sa.true()),
    )
    op.create_index("ix_aliases_alias_name", "aliases", ["alias_name"], unique=True)

    _access_table(
        "teams",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("team_name", sa.String(64), nullable=False, unique=True),
        sa.Column("short_name", sa.String(16), nullable=False, unique=True),
        sa.Column("is_verified", sa.Boolean, nullable=False, server_default=sa.true()),
        sa.Column("is_protected", sa.Boolean, nullable=False, server_default=sa.false()),
    )

    _access_table(
        "wallets",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("amount", sa.Integer, nullable=False, server_default="0"),
        sa.Column("is_protected", sa.Boolean, nullable=False, server_default=sa.false()),
    )
    op.create_index("ix_wallets_amount", "wallets", ["amount"], unique=False)

    _access_table(
        "transactions",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("amount", sa.Integer, nullable=False),
        sa.Column("from_wallet_id", sa.String(36), nullable=False),
        sa.Column("to_wallet_id", sa.String(36), nullable=False),
        sa.Column("note", sa.String(1000), nullable=True),
        sa.Column("coordinates", sa.JSON, nullable=True),
    )
    op.create_index("ix_transactions_from_wallet", "transactions", ["from_wallet_id"], unique=False)
    op.create_index("ix_transactions_to_wallet", "transactions", ["to_wallet_id"], unique=False)

    _access_table(
        "devices",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("device_name", sa.String(64), nullable=False, unique=True),
        sa.Column("socket_id", sa.String(64), nullable=True),
        sa.Column("last_user_id", sa.String(36), nullable=True),
        sa.Column("connected_to_user", sa.String(36), nullable=True, unique=True),
        sa.Column(
            "device_type",
            sa.Enum("userDevice", "gps", "custom", "restApi", name="devicetype"),
            nullable=False,
            server_default="userDevice",
        ),
    )

    _access_table(
        "forums",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("title", sa.String(255), nullable=False, unique=True),
        sa.Column("text", sa.JSON, nullable=False),
        sa.Column("is_personal", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("image", sa.JSON, nullable=True),
    )

    _access_table(
        "forum_threads",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("forum_id", sa.String(36), sa.ForeignKey("forums.id", ondelete="CASCADE"), nullable=False),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("text", sa.JSON, nullable=False),
        sa.Column("likes", sa.Integer, nullable=False, server_default="0"),
        sa.Column("dislikes", sa.Integer, nullable=False, server_default="0"),
        sa.Column("images", sa.JSON, nullable=False),
    )
    op.create_index("ix_forum_threads_forum_id", "forum_threads", ["forum_id"], unique=False)

    _access_table(
        "forum_posts",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("thread_id", sa.String(36), sa.ForeignKey("forum_threads.id", ondelete="CASCADE"), nullable=False),
        sa.Column("parent_post_id", sa.String(36), nullable=True),
        sa.Column("text", sa.JSON, nullable=False),
        sa.Column("depth", sa.Integer, nullable=False, server_default="0"),
        sa.Column("likes", sa.Integer, nullable=False, server_default="0"),
        sa.Column("dislikes", sa.Integer, nullable=False, server_default="0"),
        sa.Column("images", sa.JSON, nullable=False),
    )
    op.create_index("ix_forum_posts_thread_id", "forum_posts", ["thread_id"], unique=False)

    _access_table(
        "trigger_events",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("event_type", sa.String(32), nullable=False),
        sa.Column("change_type", sa.String(32), nullable=False),
        sa.Column("trigger_type", sa.String(32), nullable=False, server_default="manual"),
        sa.Column("content", sa.JSON, nullable=False),
        sa.Column("start_time", sa.DateTime(timezone=True), nullable=True),
        sa.Column("termination_time", sa.DateTime(timezone=True), nullable=True),
        sa.Column("duration", sa.Integer, nullable=True),
        sa.Column("iterations", sa.Integer, nullable=True),
        sa.Column("is_recurring", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("is_active", sa.Boolean, nullable=False, server_default=sa.true()),
        sa.Column("triggered_by", sa.String(36), nullable=True),
        sa.Column("should_target_single", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("single_use", sa.Boolean, nullable=False, server_default=sa.true()),
        sa.Column("coordinates", sa.JSON, nullable=True),
    )
    op.create_index("ix_trigger_events_type_active", "trigger_events", ["trigger_type", "is_active"], unique=False)

    op.create_table(
        "lantern_stations",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("station_id", sa.Integer, nullable=False, unique=True),
        sa.Column("station_name", sa.String(64), nullable=False),
        sa.Column("signal_value", sa.Integer, nullable=False, server_default="0"),
        sa.Column("is_active", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("owner", sa.Integer, nullable=True),
        sa.Column("is_under_attack", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("calibration_reward", sa.Integer, nullable=True),
        *_timestamps(),
    )

    op.create_table(
        "lantern_teams",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("team_id", sa.Integer, nullable=False, unique=True),
        sa.Column("team_name", sa.String(64), nullable=False, unique=True),
        sa.Column("short_name", sa.String(16), nullable=False, unique=True),
        sa.Column("points", sa.Integer, nullable=False, server_default="0"),
        sa.Column("is_active", sa.Boolean, nullable=False, server_default=sa.false()),
        *_timestamps(),
    )

    op.create_table(
        "lantern_rounds",
        sa.Column("id", sa.Integer, primary_key=True),
        sa.Column("is_active", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("start_time", sa.DateTime(timezone=True), nullable=True),
        sa.Column("end_time", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
    )

    op.create_table(
        "calibration_missions",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("owner", sa.String(36), nullable=False),
        sa.Column("station_id", sa.Integer, nullable=False),
        sa.Column("code", sa.String(8), nullable=False),
        sa.Column("time_completed", sa.DateTime(timezone=True), nullable=True),
        sa.Column("completed", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("cancelled", sa.Boolean, nullable=False, server_default=sa.false()),
        *_timestamps(),
    )
    op.create_index(
        "ix_calibration_missions_owner_state",
        "calibration_missions",
        ["owner", "completed", "cancelled"],
        unique=False,
    )


def downgrade():
    op.drop_table("calibration_missions")
    op.drop_table("lantern_rounds")
    op.drop_table("lantern_teams")
    op.drop_table("lantern_stations")
    op.drop_table("trigger_events")
    op.drop_table("forum_posts")
    op.drop_table("forum_threads")
    op.drop_table("forums")
    op.drop_table("devices")
    sa.Enum(name="devicetype").drop(op.get_bind(), checkfirst=True)
    op.drop_table("transactions")
    op.drop_table("wallets")
    op.drop_table("teams")
    op.drop_table("aliases")
    op.drop_table("users")
