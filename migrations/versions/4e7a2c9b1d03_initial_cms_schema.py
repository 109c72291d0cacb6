"""initial cms schema

Revision ID: 4e7a2c9b1d03
Revises:
Create Date: 2026-10-19 09:12:41.208733

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '4e7a2c9b1d03'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
    ]


def upgrade() -> None:
    """Create users, content, subscriber, campaign, notification, settings and audit tables."""
    conn = op.get_bind()
    inspector = sa.inspect(conn)
    existing_tables = set(inspector.get_table_names())

    if "users" not in existing_tables:
        op.create_table(
            "users",
            sa.Column("id", sa.String(24), primary_key=True),
            sa.Column("name", sa.String(255), nullable=False, server_default=""),
            sa.Column("email", sa.String(320), nullable=False, unique=True),
            sa.Column("password_hash", sa.String(255), nullable=True),
            sa.Column("image", sa.String(1024), nullable=True),
            sa.Column("google_id", sa.String(255), nullable=True, unique=True),
            sa.Column("role", sa.String(32), nullable=False, server_default="editor"),
            sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
            *_timestamps(),
        )

    if "films" not in existing_tables:
        op.create_table(
            "films",
            sa.Column("id", sa.String(24), primary_key=True),
            sa.Column("title", sa.String(255), nullable=False),
            sa.Column("slug", sa.String(255), nullable=False, unique=True),
            sa.Column("category", sa.String(128), nullable=False),
            sa.Column("year", sa.String(4), nullable=False),
            sa.Column("description", sa.Text(), nullable=False),
            sa.Column("image", sa.String(1024), nullable=False),
            sa.Column("director", sa.String(255), nullable=False),
            sa.Column("producer", sa.String(255), nullable=False),
            sa.Column("duration", sa.String(64), nullable=False),
            sa.Column("release_date", sa.String(64), nullable=False),
            sa.Column("synopsis", sa.Text(), nullable=False),
            sa.Column("long_description", sa.Text(), nullable=False, server_default=""),
            sa.Column("languages", sa.JSON(), nullable=False),
            sa.Column("subtitles", sa.JSON(), nullable=False),
            sa.Column("awards", sa.JSON(), nullable=False),
            sa.Column("cast_crew", sa.JSON(), nullable=False),
            sa.Column("gallery", sa.JSON(), nullable=False),
            sa.Column("trailer", sa.String(1024), nullable=True),
            sa.Column("quotes", sa.JSON(), nullable=False),
            sa.Column("rating", sa.Float(), nullable=False, server_default="0"),
            sa.Column("featured", sa.Boolean(), nullable=False, server_default=sa.false()),
            *_timestamps(),
        )
        op.create_index("idx_films_category", "films", ["category"])
        op.create_index("idx_films_year", "films", ["year"])
        op.create_index("idx_films_featured", "films", ["featured"])
        op.create_index("idx_films_created_at", "films", ["created_at"])

    if "productions" not in existing_tables:
        op.create_table(
            "productions",
            sa.Column("id", sa.String(24), primary_key=True),
            sa.Column("title", sa.String(255), nullable=False),
            sa.Column("slug", sa.String(255), nullable=False, unique=True),
            sa.Column("category", sa.String(128), nullable=False),
            sa.Column("status", sa.String(32), nullable=False, server_default="Development"),
            sa.Column("description", sa.Text(), nullable=False),
            sa.Column("image", sa.String(1024), nullable=False),
            sa.Column("long_description", sa.Text(), nullable=False, server_default=""),
            sa.Column("director", sa.String(255), nullable=False, server_default=""),
            sa.Column("producer", sa.String(255), nullable=False, server_default=""),
            sa.Column("cinematographer", sa.String(255), nullable=False, server_default=""),
            sa.Column("editor", sa.String(255), nullable=False, server_default=""),
            sa.Column("timeline", sa.String(255), nullable=False, server_default=""),
            sa.Column("start_date", sa.String(64), nullable=False, server_default=""),
            sa.Column("estimated_completion", sa.String(64), nullable=False, server_default=""),
            sa.Column("locations", sa.JSON(), nullable=False),
            sa.Column("logline", sa.Text(), nullable=False, server_default=""),
            sa.Column("synopsis", sa.Text(), nullable=False, server_default=""),
            sa.Column("progress", sa.Integer(), nullable=False, server_default="0"),
            sa.Column("featured", sa.Boolean(), nullable=False, server_default=sa.false()),
            sa.Column("team", sa.JSON(), nullable=False),
            sa.Column("stages", sa.JSON(), nullable=False),
            sa.Column("faq", sa.JSON(), nullable=False),
            sa.Column("updates", sa.JSON(), nullable=False),
            sa.Column("support_options", sa.JSON(), nullable=False),
            *_timestamps(),
        )
        op.create_index("idx_productions_status", "productions", ["status"])
        op.create_index("idx_productions_category", "productions", ["category"])
        op.create_index("idx_productions_featured", "productions", ["featured"])
        op.create_index("idx_productions_created_at", "productions", ["created_at"])

    if "stories" not in existing_tables:
        op.create_table(
            "stories",
            sa.Column("id", sa.String(24), primary_key=True),
            sa.Column("title", sa.String(255), nullable=False),
            sa.Column("slug", sa.String(255), nullable=False, unique=True),
            sa.Column("excerpt", sa.Text(), nullable=False),
            sa.Column("content", sa.JSON(), nullable=False),
            sa.Column("author", sa.String(255), nullable=False),
            sa.Column("date", sa.DateTime(), nullable=False),
            sa.Column("image", sa.String(1024), nullable=False),
            sa.Column("category", sa.String(128), nullable=False),
            sa.Column("read_time", sa.String(64), nullable=False, server_default=""),
            sa.Column("featured", sa.Boolean(), nullable=False, server_default=sa.false()),
            *_timestamps(),
        )
        op.create_index("idx_stories_category", "stories", ["category"])
        op.create_index("idx_stories_featured", "stories", ["featured"])
        op.create_index("idx_stories_date", "stories", ["date"])

    if "subscribers" not in existing_tables:
        op.create_table(
            "subscribers",
            sa.Column("id", sa.String(24), primary_key=True),
            sa.Column("email", sa.String(320), nullable=False, unique=True),
            sa.Column("name", sa.String(255), nullable=False, server_default=""),
            sa.Column("subscribed", sa.Boolean(), nullable=False, server_default=sa.true()),
            sa.Column("subscribed_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
            sa.Column("unsubscribed_at", sa.DateTime(), nullable=True),
            sa.Column("interests", sa.JSON(), nullable=False),
            sa.Column("source", sa.String(64), nullable=False, server_default="website"),
            sa.Column("last_email_sent", sa.DateTime(), nullable=True),
            sa.Column("unsubscribe_token_hash", sa.String(64), nullable=True),
            sa.Column("unsubscribe_token_expires_at", sa.DateTime(), nullable=True),
            *_timestamps(),
        )
        op.create_index("idx_subscribers_subscribed", "subscribers", ["subscribed"])
        op.create_index("idx_subscribers_source", "subscribers", ["source"])
        op.create_index("idx_subscribers_subscribed_at", "subscribers", ["subscribed_at"])

    if "campaigns" not in existing_tables:
        op.create_table(
            "campaigns",
            sa.Column("id", sa.String(24), primary_key=True),
            sa.Column("subject", sa.String(255), nullable=False),
            sa.Column("content", sa.Text(), nullable=False),
            sa.Column("filter", sa.JSON(), nullable=False),
            sa.Column("status", sa.String(32), nullable=False, server_default="queued"),
            sa.Column("recipient_count", sa.Integer(), nullable=False, server_default="0"),
            sa.Column("delivered_count", sa.Integer(), nullable=True),
            sa.Column("opened_count", sa.Integer(), nullable=True),
            sa.Column("clicked_count", sa.Integer(), nullable=True),
            sa.Column("bounced_count", sa.Integer(), nullable=True),
            sa.Column("created_by", sa.String(24), nullable=True),
            sa.Column("sent_at", sa.DateTime(), nullable=True),
            *_timestamps(),
        )
        op.create_index("idx_campaigns_status", "campaigns", ["status"])
        op.create_index("idx_campaigns_created_at", "campaigns", ["created_at"])

    if "notifications" not in existing_tables:
        op.create_table(
            "notifications",
            sa.Column("id", sa.String(24), primary_key=True),
            sa.Column("user_id", sa.String(24), nullable=False),
            sa.Column("message", sa.Text(), nullable=False),
            sa.Column("type", sa.String(32), nullable=False, server_default="info"),
            sa.Column("read", sa.Boolean(), nullable=False, server_default=sa.false()),
            sa.Column("timestamp", sa.DateTime(), nullable=False, server_default=sa.func.now()),
            sa.Column("related_item_id", sa.String(64), nullable=True),
            sa.Column("related_item_type", sa.String(64), nullable=True),
            sa.Column("link", sa.String(1024), nullable=True),
        )
        op.create_index("idx_notifications_user_read", "notifications", ["user_id", "read"])
        op.create_index("idx_notifications_timestamp", "notifications", ["timestamp"])

    if "site_settings" not in existing_tables:
        op.create_table(
            "site_settings",
            sa.Column("id", sa.String(24), primary_key=True),
            sa.Column("site_name", sa.String(255), nullable=False),
            sa.Column("site_description", sa.Text(), nullable=False),
            sa.Column("contact_email", sa.String(320), nullable=False),
            sa.Column("contact_phone", sa.String(64), nullable=False, server_default=""),
            sa.Column("social_links", sa.JSON(), nullable=False),
            sa.Column("logo_light", sa.String(1024), nullable=False),
            sa.Column("logo_dark", sa.String(1024), nullable=False),
            sa.Column("meta_image", sa.String(1024), nullable=False),
            *_timestamps(),
        )

    if "audit_events" not in existing_tables:
        op.create_table(
            "audit_events",
            sa.Column("id", sa.String(24), primary_key=True),
            sa.Column("timestamp", sa.DateTime(), nullable=False, server_default=sa.func.now()),
            sa.Column("request_id", sa.String(64), nullable=True),
            sa.Column("page_url", sa.String(1024), nullable=False, server_default=""),
            sa.Column("page_type", sa.String(64), nullable=False),
            sa.Column("event", sa.String(64), nullable=False),
            sa.Column("item_id", sa.String(64), nullable=True),
            sa.Column("actor_id", sa.String(24), nullable=True),
            sa.Column("extra_data", sa.JSON(), nullable=True),
            sa.Column("user_agent", sa.Text(), nullable=True),
        )
        op.create_index("idx_audit_events_timestamp", "audit_events", ["timestamp"])
        op.create_index("idx_audit_events_page_type", "audit_events", ["page_type"])


def downgrade() -> None:
    for table in (
        "audit_events",
        "site_settings",
        "notifications",
        "campaigns",
        "subscribers",
        "stories",
        "productions",
        "films",
        "users",
    ):
        op.drop_table(table)
