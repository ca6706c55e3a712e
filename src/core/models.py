"""SQLAlchemy ORM models for the RevSend CRM."""
from __future__ import annotations

import enum
from datetime import datetime
from typing import Any, Optional

from sqlalchemy import (
    Boolean,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    JSON,
    String,
    Text,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from core.db import Base
from core.utils import generate_unique_key


# =============================================================================
# Enums
# =============================================================================


class OrgRole(str, enum.Enum):
    """Organization-scoped membership roles."""
    GERENTE = "gerente"    # Manager
    VENDEDOR = "vendedor"  # Salesperson


class LeadStatus(str, enum.Enum):
    """Lead status assigned from the lead score."""
    NOVO = "novo"              # New / cold start
    QUENTE = "quente"          # Hot
    MORNO = "morno"            # Warm
    FRIO = "frio"              # Cold
    CONVERTIDO = "convertido"  # Converted
    PERDIDO = "perdido"        # Lost


class SentMessageStatus(str, enum.Enum):
    """Delivery status of an outbound campaign message."""
    PENDING = "pending"
    SENT = "sent"
    FAILED = "failed"


def _id_column() -> Any:
    return mapped_column(String(32), primary_key=True, default=generate_unique_key)


# =============================================================================
# Tenancy
# =============================================================================


class Organization(Base):
    """Tenant boundary scoping users, contacts and notifications."""
    __tablename__ = "organization"

    id: Mapped[str] = _id_column()
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    slug: Mapped[str] = mapped_column(String(100), unique=True, nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )

    members: Mapped[list["OrganizationMember"]] = relationship(
        "OrganizationMember", back_populates="organization", cascade="all, delete-orphan"
    )
    contact_lists: Mapped[list["ContactList"]] = relationship(
        "ContactList", back_populates="organization", cascade="all, delete-orphan"
    )

    def __repr__(self) -> str:
        return f"<Organization(id={self.id}, slug={self.slug})>"


class User(Base):
    """Application user. `is_master` marks a global administrator."""
    __tablename__ = "user"

    id: Mapped[str] = _id_column()
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False, index=True)
    name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    is_master: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    # Account lockout
    failed_login_attempts: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    last_failed_login: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    memberships: Mapped[list["OrganizationMember"]] = relationship(
        "OrganizationMember", back_populates="user", cascade="all, delete-orphan"
    )

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email={self.email}, is_master={self.is_master})>"


class OrganizationMember(Base):
    """Membership of a user in an organization with an org-scoped role."""
    __tablename__ = "organization_member"
    __table_args__ = (
        UniqueConstraint("organization_id", "user_id", name="uq_organization_member"),
    )

    id: Mapped[str] = _id_column()
    organization_id: Mapped[str] = mapped_column(
        ForeignKey("organization.id", ondelete="CASCADE"), nullable=False, index=True
    )
    user_id: Mapped[str] = mapped_column(
        ForeignKey("user.id", ondelete="CASCADE"), nullable=False, index=True
    )
    role: Mapped[str] = mapped_column(String(20), default=OrgRole.VENDEDOR.value, nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )

    organization: Mapped["Organization"] = relationship("Organization", back_populates="members")
    user: Mapped["User"] = relationship("User", back_populates="memberships")


# =============================================================================
# Contacts
# =============================================================================


class ContactList(Base):
    """An uploaded list of contacts owned by an organization."""
    __tablename__ = "contact_list"

    id: Mapped[str] = _id_column()
    organization_id: Mapped[str] = mapped_column(
        ForeignKey("organization.id", ondelete="CASCADE"), nullable=False, index=True
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )

    organization: Mapped["Organization"] = relationship("Organization", back_populates="contact_lists")
    contacts: Mapped[list["Contact"]] = relationship(
        "Contact", back_populates="contact_list", cascade="all, delete-orphan"
    )


class Contact(Base):
    """A contact (lead) with its current lead score."""
    __tablename__ = "contact"

    id: Mapped[str] = _id_column()
    list_id: Mapped[str] = mapped_column(
        ForeignKey("contact_list.id", ondelete="CASCADE"), nullable=False, index=True
    )
    name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    phone_number: Mapped[str] = mapped_column(String(30), nullable=False)

    # Lead scoring
    lead_score: Mapped[Optional[int]] = mapped_column(Integer, nullable=True, index=True)
    lead_status: Mapped[Optional[str]] = mapped_column(String(20), nullable=True, index=True)
    scored_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    score_metadata: Mapped[Optional[dict[str, Any]]] = mapped_column(JSON, nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )

    contact_list: Mapped["ContactList"] = relationship("ContactList", back_populates="contacts")
    replies: Mapped[list["Reply"]] = relationship(
        "Reply", back_populates="contact", cascade="all, delete-orphan"
    )
    sent_messages: Mapped[list["SentMessage"]] = relationship(
        "SentMessage", back_populates="contact", cascade="all, delete-orphan"
    )

    def __repr__(self) -> str:
        return f"<Contact(id={self.id}, lead_score={self.lead_score}, lead_status={self.lead_status})>"


# =============================================================================
# Campaign Messaging
# =============================================================================


class Campaign(Base):
    """An outbound messaging campaign."""
    __tablename__ = "campaign"

    id: Mapped[str] = _id_column()
    organization_id: Mapped[str] = mapped_column(
        ForeignKey("organization.id", ondelete="CASCADE"), nullable=False, index=True
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )


class SentMessage(Base):
    """A message sent to a contact."""
    __tablename__ = "sent_message"

    id: Mapped[str] = _id_column()
    contact_id: Mapped[str] = mapped_column(
        ForeignKey("contact.id", ondelete="CASCADE"), nullable=False, index=True
    )
    campaign_id: Mapped[Optional[str]] = mapped_column(
        ForeignKey("campaign.id", ondelete="SET NULL"), nullable=True, index=True
    )
    status: Mapped[str] = mapped_column(
        String(20), default=SentMessageStatus.PENDING.value, nullable=False
    )
    sent_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    contact: Mapped["Contact"] = relationship("Contact", back_populates="sent_messages")


class Reply(Base):
    """An inbound reply from a contact to a campaign."""
    __tablename__ = "reply"

    id: Mapped[str] = _id_column()
    contact_id: Mapped[str] = mapped_column(
        ForeignKey("contact.id", ondelete="CASCADE"), nullable=False, index=True
    )
    campaign_id: Mapped[str] = mapped_column(
        ForeignKey("campaign.id", ondelete="CASCADE"), nullable=False, index=True
    )
    content: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    received_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )

    contact: Mapped["Contact"] = relationship("Contact", back_populates="replies")
    campaign: Mapped["Campaign"] = relationship("Campaign")


# =============================================================================
# Notifications
# =============================================================================


class Notification(Base):
    """In-app notification addressed to a user within an organization."""
    __tablename__ = "notification"
    __table_args__ = (
        Index("ix_notification_user_org_read", "user_id", "organization_id", "read"),
    )

    id: Mapped[str] = _id_column()
    user_id: Mapped[str] = mapped_column(
        ForeignKey("user.id", ondelete="CASCADE"), nullable=False
    )
    organization_id: Mapped[str] = mapped_column(
        ForeignKey("organization.id", ondelete="CASCADE"), nullable=False
    )
    type: Mapped[str] = mapped_column(String(50), nullable=False)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    message: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    # "metadata" is reserved on declarative classes
    data: Mapped[Optional[dict[str, Any]]] = mapped_column("metadata", JSON, nullable=True)
    read: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    read_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )

    def __repr__(self) -> str:
        return f"<Notification(id={self.id}, type={self.type}, read={self.read})>"


__all__ = [
    "Base",
    "OrgRole",
    "LeadStatus",
    "SentMessageStatus",
    "Organization",
    "User",
    "OrganizationMember",
    "ContactList",
    "Contact",
    "Campaign",
    "SentMessage",
    "Reply",
    "Notification",
]
