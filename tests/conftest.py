import os
from typing import Generator

# Override settings for tests before importing app modules
TEST_DATABASE_URL = "sqlite:///:memory:"
os.environ["DATABASE_URL"] = TEST_DATABASE_URL
os.environ["JWT_SECRET"] = "test-secret-key-for-testing-only"
os.environ["STRIPE_SECRET_KEY"] = "sk_test_mock"
os.environ["STRIPE_WEBHOOK_SECRET"] = "whsec_test_mock"
os.environ["STRIPE_RETRY_DELAY_SECONDS"] = "0"
os.environ["RECONCILE_RETRY_DELAY_SECONDS"] = "0"

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from app.main import app
from app.models import Order, Role, User
from app.models.database import Base, get_db
from app.services.record_store import RecordStore
from helpers import bearer, create_order

# Create test database engine
test_engine = create_engine(
    TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=test_engine)


@pytest.fixture(scope="function")
def db() -> Generator[Session, None, None]:
    """Create a fresh database for each test."""
    Base.metadata.create_all(bind=test_engine)
    db_session = TestSessionLocal()
    try:
        yield db_session
    finally:
        db_session.close()
        Base.metadata.drop_all(bind=test_engine)


@pytest.fixture(scope="function")
def client(db: Session) -> Generator[TestClient, None, None]:
    """Create a test client with database override."""

    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def store(db: Session) -> RecordStore:
    return RecordStore(db)


def _create_user(db: Session, email: str, role: Role, chef_id: str | None = None) -> User:
    user = User(email=email, display_name=email.split("@")[0], role=role.value, chef_id=chef_id)
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


@pytest.fixture
def customer(db: Session) -> User:
    """Customer from the ordering scenario (u@x.com)."""
    return _create_user(db, "u@x.com", Role.CUSTOMER)


@pytest.fixture
def other_customer(db: Session) -> User:
    return _create_user(db, "other@x.com", Role.CUSTOMER)


@pytest.fixture
def chef(db: Session) -> User:
    """Chef with chef id c1."""
    return _create_user(db, "chef@x.com", Role.CHEF, chef_id="c1")


@pytest.fixture
def other_chef(db: Session) -> User:
    return _create_user(db, "chef2@x.com", Role.CHEF, chef_id="c2")


@pytest.fixture
def admin(db: Session) -> User:
    return _create_user(db, "admin@x.com", Role.ADMIN)


@pytest.fixture
def customer_headers(customer: User) -> dict[str, str]:
    return bearer(customer)


@pytest.fixture
def chef_headers(chef: User) -> dict[str, str]:
    return bearer(chef)


@pytest.fixture
def admin_headers(admin: User) -> dict[str, str]:
    return bearer(admin)


@pytest.fixture
def pending_order(db: Session, customer: User, chef: User) -> Order:
    return create_order(db)
