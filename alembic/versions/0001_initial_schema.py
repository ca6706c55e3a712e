"""Initial schema: tenancy, contacts, campaign messaging, notifications.

Revision ID: 0001_initial_schema
Revises:
Create Date: 2026-10-19
"""
from __future__ import annotations

from alembic import op
import sqlalchemy as sa

revision = "0001_initial_schema"
down_revision = None
branch_labels = None
depends_on = None


def _id() -> sa.Column:
    return sa.Column("id", sa.String(32), primary_key=True)


def _created_at() -> sa.Column:
    return sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now())


def upgrade() -> None:
    op.create_table(
        "organization",
        _id(),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("slug", sa.String(100), nullable=False, unique=True),
        _created_at(),
    )

    op.create_table(
        "user",
        _id(),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("name", sa.String(255), nullable=True),
        sa.Column("password_hash", sa.String(255), nullable=False),
        sa.Column("is_master", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("failed_login_attempts", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("last_failed_login", sa.DateTime(timezone=True), nullable=True),
        _created_at(),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index("ix_user_email", "user", ["email"], unique=True)

    op.create_table(
        "organization_member",
        _id(),
        sa.Column(
            "organization_id", sa.String(32),
            sa.ForeignKey("organization.id", ondelete="CASCADE"), nullable=False,
        ),
        sa.Column("user_id", sa.String(32), sa.ForeignKey("user.id", ondelete="CASCADE"), nullable=False),
        sa.Column("role", sa.String(20), nullable=False, server_default="vendedor"),
        _created_at(),
        sa.UniqueConstraint("organization_id", "user_id", name="uq_organization_member"),
    )
    op.create_index("ix_organization_member_organization_id", "organization_member", ["organization_id"])
    op.create_index("ix_organization_member_user_id", "organization_member", ["user_id"])

    op.create_table(
        "contact_list",
        _id(),
        sa.Column(
            "organization_id", sa.String(32),
            sa.ForeignKey("organization.id", ondelete="CASCADE"), nullable=False,
        ),
        sa.Column("name", sa.String(255), nullable=False),
        _created_at(),
    )
    op.create_index("ix_contact_list_organization_id", "contact_list", ["organization_id"])

    op.create_table(
        "contact",
        _id(),
        sa.Column("list_id", sa.String(32), sa.ForeignKey("contact_list.id", ondelete="CASCADE"), nullable=False),
        sa.Column("name", sa.String(255), nullable=True),
        sa.Column("phone_number", sa.String(30), nullable=False),
        sa.Column("lead_score", sa.Integer(), nullable=True),
        sa.Column("lead_status", sa.String(20), nullable=True),
        sa.Column("scored_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("score_metadata", sa.JSON(), nullable=True),
        _created_at(),
    )
    op.create_index("ix_contact_list_id", "contact", ["list_id"])
    op.create_index("ix_contact_lead_score", "contact", ["lead_score"])
    op.create_index("ix_contact_lead_status", "contact", ["lead_status"])

    op.create_table(
        "campaign",
        _id(),
        sa.Column(
            "organization_id", sa.String(32),
            sa.ForeignKey("organization.id", ondelete="CASCADE"), nullable=False,
        ),
        sa.Column("name", sa.String(255), nullable=False),
        _created_at(),
    )
    op.create_index("ix_campaign_organization_id", "campaign", ["organization_id"])

    op.create_table(
        "sent_message",
        _id(),
        sa.Column("contact_id", sa.String(32), sa.ForeignKey("contact.id", ondelete="CASCADE"), nullable=False),
        sa.Column("campaign_id", sa.String(32), sa.ForeignKey("campaign.id", ondelete="SET NULL"), nullable=True),
        sa.Column("status", sa.String(20), nullable=False, server_default="pending"),
        sa.Column("sent_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_sent_message_contact_id", "sent_message", ["contact_id"])
    op.create_index("ix_sent_message_campaign_id", "sent_message", ["campaign_id"])

    op.create_table(
        "reply",
        _id(),
        sa.Column("contact_id", sa.String(32), sa.ForeignKey("contact.id", ondelete="CASCADE"), nullable=False),
        sa.Column("campaign_id", sa.String(32), sa.ForeignKey("campaign.id", ondelete="CASCADE"), nullable=False),
        sa.Column("content", sa.Text(), nullable=True),
        sa.Column("received_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_reply_contact_id", "reply", ["contact_id"])
    op.create_index("ix_reply_campaign_id", "reply", ["campaign_id"])

    op.create_table(
        "notification",
        _id(),
        sa.Column("user_id", sa.String(32), sa.ForeignKey("user.id", ondelete="CASCADE"), nullable=False),
        sa.Column(
            "organization_id", sa.String(32),
            sa.ForeignKey("organization.id", ondelete="CASCADE"), nullable=False,
        ),
        sa.Column("type", sa.String(50), nullable=False),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("message", sa.Text(), nullable=True),
        sa.Column("metadata", sa.JSON(), nullable=True),
        sa.Column("read", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("read_at", sa.DateTime(timezone=True), nullable=True),
        _created_at(),
    )
    op.create_index(
        "ix_notification_user_org_read", "notification", ["user_id", "organization_id", "read"]
    )


def downgrade() -> None:
    op.drop_table("notification")
    op.drop_table("reply")
    op.drop_table("sent_message")
    op.drop_table("campaign")
    op.drop_table("contact")
    op.drop_table("contact_list")
    op.drop_table("organization_member")
    op.drop_table("user")
    op.drop_table("organization")
