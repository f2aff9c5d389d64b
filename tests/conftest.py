"""
Pytest fixtures for the stock ledger API.

Provides:
- A file-backed SQLite database per test (QueuePool, so pool usage is observable)
- A TestClient with get_db and the checkout engine wired to that database
- Seeded users for every role and bearer headers for each
- A small stocked inventory
"""

import os
import tempfile

os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")
os.environ.setdefault("INTERNAL_ADMIN_SECRET", "bootstrap-secret")
os.environ.setdefault("UPLOAD_DIR", tempfile.mkdtemp(prefix="stock-ledger-uploads-"))

from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import QueuePool

from app.core.hashing import hash_password
from app.core.jwt import create_access_token
from app.database import Base, get_db
from app.main import app
from app.models.inventory import InventoryItem
from app.models.transactions import LedgerEntry
from app.models.users import User, ROLE_ADMIN, ROLE_STOCK_OPERATOR, ROLE_USER
from app.services.checkout import CheckoutEngine, get_checkout_engine

TEST_PASSWORD = "correct-horse-1"


@pytest.fixture
def engine(tmp_path):
    eng = create_engine(
        f"sqlite:///{tmp_path / 'inventory.db'}",
        connect_args={"check_same_thread": False},
        poolclass=QueuePool,
        pool_size=5,
        max_overflow=0,
    )
    Base.metadata.create_all(eng)
    yield eng
    eng.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


@pytest.fixture
def db_session(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def checkout_engine(session_factory):
    return CheckoutEngine(session_factory)


@pytest.fixture
def client(session_factory, checkout_engine):
    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_checkout_engine] = lambda: checkout_engine

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


@pytest.fixture
def users(db_session):
    password_hash = hash_password(TEST_PASSWORD)
    created = {}

    for role, email in (
        (ROLE_ADMIN, "admin@example.com"),
        (ROLE_STOCK_OPERATOR, "operator@example.com"),
        (ROLE_USER, "user@example.com"),
    ):
        user = User(name=role.title(), email=email, password_hash=password_hash, role=role)
        db_session.add(user)
        created[role] = user

    db_session.commit()
    return created


@pytest.fixture
def headers(users):
    def bearer(user):
        token = create_access_token(
            data={"sub": str(user.id), "email": user.email, "role": user.role}
        )
        return {"Authorization": f"Bearer {token}"}

    return {role: bearer(user) for role, user in users.items()}


@pytest.fixture
def stocked(db_session):
    """Item A: 5 units at 10.00, item B: 3 units at 5.00."""
    items = [
        InventoryItem(
            comp_code="A",
            description="Widget",
            quantity=5,
            price=Decimal("10.00"),
            barcode="0001",
            category="Hardware",
            unit_type="Single Unit",
            pack_size=1,
        ),
        InventoryItem(
            comp_code="B",
            description="Bolt pack",
            quantity=3,
            price=Decimal("5.00"),
            barcode="0002",
            category="Hardware",
            unit_type="Pack",
            pack_size=10,
        ),
    ]
    db_session.add_all(items)
    db_session.commit()
    return items


def stock_snapshot(session_factory):
    with session_factory() as session:
        inventory = {
            item.comp_code: item.quantity
            for item in session.query(InventoryItem).all()
        }
        ledger = [
            (e.item_code, e.quantity, e.transaction_type, e.price)
            for e in session.query(LedgerEntry).order_by(LedgerEntry.id).all()
        ]
    return inventory, ledger


@pytest.fixture
def snapshot(session_factory):
    return lambda: stock_snapshot(session_factory)
