from __future__ import annotations

from collections.abc import Callable, Generator
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from memberdues.auth.deps import get_current_user
from memberdues.core.db import Base, get_db
from memberdues.main import app
from memberdues.models.member import Member
from memberdues.models.payment_record import PaymentRecord
from memberdues.models.user import User
from memberdues.services.payments import parse_month_key
from memberdues.services.whatsapp import DeliveryResult, get_notification_gateway

SQLALCHEMY_TEST_URL = "sqlite+pysqlite:///:memory:"
engine = create_engine(
    SQLALCHEMY_TEST_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False, expire_on_commit=False)


def override_get_db() -> Generator[Session, None, None]:
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


class RecordingGateway:
    """Collects outgoing messages instead of calling a provider."""

    def __init__(self, failing_member_ids: set[int] | None = None) -> None:
        self.sent: list[tuple[int, str]] = []
        self.failing_member_ids = failing_member_ids or set()

    def send(self, member: Member, message: str) -> DeliveryResult:
        self.sent.append((member.id, message))
        if member.id in self.failing_member_ids:
            return DeliveryResult(status="failed", detail="provider rejected")
        return DeliveryResult(status="sent")


@pytest.fixture(autouse=True)
def setup_database() -> Generator[None, None, None]:
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture()
def db_session() -> Generator[Session, None, None]:
    session = TestingSessionLocal()
    try:
        yield session
        session.commit()
    finally:
        session.close()


@pytest.fixture()
def gateway() -> RecordingGateway:
    return RecordingGateway()


@pytest.fixture()
def client(db_session: Session, gateway: RecordingGateway) -> Generator[TestClient, None, None]:
    app.dependency_overrides.clear()
    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_notification_gateway] = lambda: gateway
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture()
def authorize(client: TestClient):
    def _apply(user: User):
        app.dependency_overrides[get_current_user] = lambda: user

    yield _apply
    app.dependency_overrides.pop(get_current_user, None)


@pytest.fixture()
def admin_user(db_session: Session) -> User:
    user = User(email="admin@example.com", hashed_password="hash", role="admin")
    db_session.add(user)
    db_session.commit()
    db_session.refresh(user)
    return user


@pytest.fixture()
def make_member(db_session: Session) -> Callable[..., Member]:
    counter = {"value": 0}

    def _make(
        name: str | None = None,
        *,
        status: str = "active",
        cash_balance: str | Decimal = "0",
        email: str | None = None,
    ) -> Member:
        counter["value"] += 1
        index = counter["value"]
        email = email or f"member{index}@example.com"
        user = User(email=email, hashed_password="hash", role="member")
        db_session.add(user)
        db_session.flush()
        member = Member(
            name=name or f"Member {index}",
            phone=f"+1416555{index:04d}",
            email=email,
            status=status,
            cash_balance=Decimal(str(cash_balance)),
            user_id=user.id,
        )
        db_session.add(member)
        db_session.commit()
        db_session.refresh(member)
        return member

    return _make


@pytest.fixture()
def sample_member(make_member) -> Member:
    return make_member("Abeba Tesfaye", cash_balance="150.50")


@pytest.fixture()
def make_payment(db_session: Session, admin_user: User) -> Callable[..., PaymentRecord]:
    def _make(
        member: Member,
        month: str,
        *,
        amount_due: str = "100.00",
        amount_paid: str = "0.00",
        status: str = "unpaid",
    ) -> PaymentRecord:
        year, month_number = parse_month_key(month)
        record = PaymentRecord(
            member_id=member.id,
            month=month,
            year=year,
            month_number=month_number,
            amount_due=Decimal(amount_due),
            amount_paid=Decimal(amount_paid),
            status=status,
            recorded_by=admin_user.id,
        )
        db_session.add(record)
        db_session.commit()
        db_session.refresh(record)
        return record

    return _make
