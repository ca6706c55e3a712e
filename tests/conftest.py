"""Pytest configuration and fixtures."""
from __future__ import annotations

import os
import sys
from datetime import timedelta
from pathlib import Path
from typing import Callable, Dict, Optional

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

# Add src to path for imports
src_path = Path(__file__).parent.parent / "src"
if str(src_path) not in sys.path:
    sys.path.insert(0, str(src_path))

# Set test environment
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-for-ci")

from core.auth import create_access_token, hash_password
from core.db import Base
from core.models import (
    Campaign,
    Contact,
    ContactList,
    Organization,
    OrganizationMember,
    Reply,
    SentMessage,
    User,
)
from core.types import SessionUser
from core.utils import utcnow

TEST_PASSWORD = "senha-segura-123"


@pytest.fixture(scope="session")
def engine():
    """Create a test database engine."""
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    # Enable foreign key support for SQLite
    @event.listens_for(engine, "connect")
    def set_sqlite_pragma(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    @event.listens_for(engine, "begin")
    def begin_sqlite_transaction(conn):
        conn.exec_driver_sql("BEGIN")

    return engine


@pytest.fixture(scope="session")
def tables(engine):
    """Create all tables for testing."""
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db_session(engine, tables) -> Session:
    """
    Returns a SQLAlchemy session for testing.

    Each test gets a fresh transaction that is rolled back after the test.
    """
    connection = engine.connect()
    transaction = connection.begin()

    TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=connection)
    session = TestingSession()

    yield session

    session.close()
    transaction.rollback()
    connection.close()


@pytest.fixture(autouse=True)
def clear_login_attempts():
    """Reset the in-memory login rate limiter between tests."""
    from api.auth_deps import reset_login_rate_limit

    reset_login_rate_limit()
    yield
    reset_login_rate_limit()


@pytest.fixture
def client(db_session):
    """TestClient whose routes share the test session."""
    from api.app import app
    from api.deps import get_db, get_readonly_db

    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_readonly_db] = override_get_db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


# ---------------------------------------------------------------------------
# Tenancy fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def organization(db_session) -> Organization:
    org = Organization(name="Acme Vendas", slug="acme-vendas")
    db_session.add(org)
    db_session.flush()
    return org


@pytest.fixture
def other_organization(db_session) -> Organization:
    org = Organization(name="Outra Empresa", slug="outra-empresa")
    db_session.add(org)
    db_session.flush()
    return org


@pytest.fixture
def make_user(db_session) -> Callable[..., User]:
    """Factory creating a user, optionally a member of an organization."""

    def _make_user(
        email: str,
        organization: Optional[Organization] = None,
        role: str = "vendedor",
        is_master: bool = False,
        is_active: bool = True,
    ) -> User:
        user = User(
            email=email,
            name=email.split("@")[0].title(),
            password_hash=hash_password(TEST_PASSWORD),
            is_master=is_master,
            is_active=is_active,
        )
        db_session.add(user)
        db_session.flush()
        if organization is not None:
            db_session.add(
                OrganizationMember(organization_id=organization.id, user_id=user.id, role=role)
            )
            db_session.flush()
        return user

    return _make_user


@pytest.fixture
def gerente(make_user, organization) -> User:
    return make_user("gerente@acme.com", organization, role="gerente")


@pytest.fixture
def vendedor(make_user, organization) -> User:
    return make_user("vendedor@acme.com", organization, role="vendedor")


@pytest.fixture
def master(make_user) -> User:
    return make_user("master@revsend.com", is_master=True)


@pytest.fixture
def auth_headers() -> Callable[..., Dict[str, str]]:
    """Build a bearer header for a user in an organization context."""

    def _auth_headers(
        user: User,
        organization: Optional[Organization] = None,
        org_role: Optional[str] = None,
    ) -> Dict[str, str]:
        principal = SessionUser(
            id=user.id,
            email=user.email,
            name=user.name,
            is_master=user.is_master,
            current_org_id=organization.id if organization else None,
            current_org_role=org_role,
        )
        return {"Authorization": f"Bearer {create_access_token(principal)}"}

    return _auth_headers


# ---------------------------------------------------------------------------
# Contact fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def contact_list(db_session, organization) -> ContactList:
    contact_list = ContactList(organization_id=organization.id, name="Leads Outubro")
    db_session.add(contact_list)
    db_session.flush()
    return contact_list


@pytest.fixture
def campaign(db_session, organization) -> Campaign:
    campaign = Campaign(organization_id=organization.id, name="Promo Outubro")
    db_session.add(campaign)
    db_session.flush()
    return campaign


@pytest.fixture
def make_contact(db_session, contact_list) -> Callable[..., Contact]:
    def _make_contact(
        name: str = "Maria Silva",
        phone_number: str = "+5511999990000",
        lead_score: Optional[int] = None,
        lead_status: Optional[str] = None,
        scored: bool = False,
        target_list: Optional[ContactList] = None,
    ) -> Contact:
        contact = Contact(
            list_id=(target_list or contact_list).id,
            name=name,
            phone_number=phone_number,
            lead_score=lead_score,
            lead_status=lead_status,
            scored_at=utcnow() if scored else None,
        )
        db_session.add(contact)
        db_session.flush()
        return contact

    return _make_contact


@pytest.fixture
def engaged_contact(db_session, make_contact, campaign) -> Contact:
    """Contact who answered quickly and positively after a sent message."""
    contact = make_contact(name="João Souza")
    sent_at = utcnow() - timedelta(hours=2)
    db_session.add(
        SentMessage(
            contact_id=contact.id,
            campaign_id=campaign.id,
            status="sent",
            sent_at=sent_at,
        )
    )
    db_session.add(
        Reply(
            contact_id=contact.id,
            campaign_id=campaign.id,
            content="Sim, tenho interesse! Quero saber o preço",
            received_at=sent_at + timedelta(minutes=3),
        )
    )
    db_session.flush()
    return contact
