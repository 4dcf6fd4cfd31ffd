"""
Shared fixtures: an in-memory SQLite database per test, seeded with a
landlord, a registered tenant user, a guest and one property.

Run with:
    python -m pytest tests -v
"""
import os
from datetime import date
from decimal import Decimal

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("NOTIFY_WEBHOOK_URL", "")

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import Session
from sqlalchemy.pool import StaticPool

from database import configure_sqlite
from models import Base, Property, User
from services.tenancy_service import LeaseTerms, Occupant, TenancyService


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    configure_sqlite(engine)
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def db(engine):
    session = Session(bind=engine, autoflush=False, expire_on_commit=False)
    yield session
    session.rollback()
    session.close()


@pytest.fixture
def landlord(db):
    user = User(email="landlord@example.com", full_name="Lydia Landlord", role="landlord")
    db.add(user)
    db.flush()
    return user


@pytest.fixture
def tenant_user(db):
    user = User(email="tenant@example.com", full_name="Amina Juma", phone="+255700000001", role="tenant")
    db.add(user)
    db.flush()
    return user


@pytest.fixture
def guest(db):
    user = User(email="guest@example.com", full_name="Greg Guest", role="guest")
    db.add(user)
    db.flush()
    return user


@pytest.fixture
def prop(db, landlord):
    prop = Property(landlord_id=landlord.id, title="Sea View 2B", address="12 Ocean Rd", city="Dar es Salaam")
    db.add(prop)
    db.flush()
    return prop


@pytest.fixture
def other_prop(db, landlord):
    prop = Property(landlord_id=landlord.id, title="Garden Cottage", city="Arusha")
    db.add(prop)
    db.flush()
    return prop


def make_terms(start=date(2025, 2, 1), end=date(2026, 2, 1), rent="50000", **kwargs):
    return LeaseTerms(
        lease_start_date=start,
        lease_end_date=end,
        monthly_rent=Decimal(rent),
        **kwargs,
    )


@pytest.fixture
def tenant(db, landlord, tenant_user, prop):
    """Registered tenant on a Feb 2025 lease; rent 50,000 due on the 1st with 4 days' grace."""
    return TenancyService.create_tenancy(
        db,
        landlord.id,
        prop.id,
        Occupant(user_id=tenant_user.id),
        make_terms(late_fee_amount=Decimal("2500")),
        as_of=date(2025, 1, 20),
    )
