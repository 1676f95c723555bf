from __future__ import annotations

import logging

import pytest
from fastapi import HTTPException
from sqlalchemy.exc import SQLAlchemyError

from memberdues.models.member import Member
from memberdues.models.notification_log import NotificationLog
from memberdues.models.payment_record import PaymentRecord
from memberdues.models.user import User
from memberdues.schemas.member import MemberCreate
from memberdues.schemas.notification import NotificationSendRequest
from memberdues.services import auth as auth_service
from memberdues.services import dashboard as dashboard_service
from memberdues.services import members as members_service
from memberdues.services import notifications as notifications_service
from memberdues.services import payments as payments_service
from memberdues.services.whatsapp import DeliveryResult


def test_failed_member_insert_leaves_no_user(db_session, make_member, monkeypatch):
    existing = make_member("Existing", email="taken@example.com")
    # Move the login email away so only the member row collides.
    user = db_session.get(User, existing.user_id)
    user.email = "existing-login@example.com"
    db_session.commit()

    monkeypatch.setattr(members_service, "_ensure_email_available", lambda *args, **kwargs: None)
    payload = MemberCreate(
        name="Duplicate",
        phone="+14165550111",
        email="taken@example.com",
        password="secret123",
    )
    with pytest.raises(HTTPException) as excinfo:
        members_service.create_member(db_session, payload)

    assert excinfo.value.status_code == 409
    assert db_session.query(User).filter(User.email == "taken@example.com").count() == 0
    assert db_session.query(Member).count() == 1


def test_failed_delete_rolls_back_cascade(db_session, make_member, make_payment, monkeypatch):
    member = make_member("Keep Me")
    make_payment(member, "2024-01")

    original_flush = db_session.flush

    def failing_flush(*args, **kwargs):
        raise SQLAlchemyError("database unavailable")

    monkeypatch.setattr(db_session, "flush", failing_flush)
    with pytest.raises(SQLAlchemyError):
        members_service.delete_member(db_session, member.id)
    monkeypatch.setattr(db_session, "flush", original_flush)

    assert db_session.query(Member).filter_by(id=member.id).count() == 1
    assert db_session.query(PaymentRecord).filter_by(member_id=member.id).count() == 1
    assert db_session.query(User).filter_by(id=member.user_id).count() == 1


def test_notification_logs_are_all_or_nothing(db_session, admin_user, make_member, gateway, monkeypatch, caplog):
    first = make_member("First")
    second = make_member("Second")

    def failing_commit():
        raise SQLAlchemyError("lost connection before commit")

    monkeypatch.setattr(db_session, "commit", failing_commit)
    payload = NotificationSendRequest(member_ids=[first.id, second.id], type="payment_reminder", message="Pay")
    with caplog.at_level(logging.ERROR, logger="memberdues"):
        with pytest.raises(SQLAlchemyError):
            notifications_service.send_whatsapp_notifications(db_session, payload, admin_user.id, gateway)
    monkeypatch.undo()

    assert db_session.query(NotificationLog).count() == 0
    # Every message left before the log write was attempted.
    assert [member_id for member_id, _ in gateway.sent] == [first.id, second.id]
    failure = next(record for record in caplog.records if record.getMessage() == "notification_log_failed")
    assert failure.deliveries == {first.id: "sent", second.id: "sent"}


def _failing_query(*args, **kwargs):
    raise SQLAlchemyError("database unavailable")


@pytest.mark.parametrize(
    ("call", "event"),
    [
        (lambda db: members_service.list_members(db), "member_list_failed"),
        (lambda db: members_service.get_member_by_user(db, 1), "member_lookup_failed"),
        (lambda db: payments_service.get_payments_by_month(db, "2024-01"), "payment_list_failed"),
        (lambda db: payments_service.get_member_payment_history(db, 1), "payment_history_failed"),
        (lambda db: payments_service.get_current_month_payment(db, 1), "payment_lookup_failed"),
        (lambda db: payments_service.get_members_with_outstanding_payments(db, "2024-01"), "outstanding_payments_failed"),
        (lambda db: notifications_service.get_notification_history(db), "notification_history_failed"),
        (lambda db: notifications_service.get_member_notifications(db, 1), "member_notifications_failed"),
        (lambda db: dashboard_service.get_admin_dashboard(db), "admin_dashboard_failed"),
    ],
)
def test_read_failures_are_logged_and_raised(db_session, monkeypatch, caplog, call, event):
    monkeypatch.setattr(db_session, "query", _failing_query)
    with caplog.at_level(logging.ERROR, logger="memberdues"):
        with pytest.raises(SQLAlchemyError):
            call(db_session)
    assert [record.getMessage() for record in caplog.records] == [event]
    assert caplog.records[0].exc_info is not None


@pytest.mark.parametrize(
    ("call", "event"),
    [
        (lambda db: members_service.get_member(db, 1), "member_lookup_failed"),
        (lambda db: dashboard_service.get_member_dashboard(db, 1), "member_dashboard_failed"),
        (lambda db: auth_service.get_user(db, 1), "user_lookup_failed"),
    ],
)
def test_primary_key_lookup_failures_are_logged(db_session, monkeypatch, caplog, call, event):
    monkeypatch.setattr(db_session, "get", _failing_query)
    with caplog.at_level(logging.ERROR, logger="memberdues"):
        with pytest.raises(SQLAlchemyError):
            call(db_session)
    assert [record.getMessage() for record in caplog.records] == [event]


def test_duplicate_member_ids_are_logged_once(db_session, admin_user, sample_member):
    class Gateway:
        def send(self, member, message):
            return DeliveryResult(status="sent")

    payload = NotificationSendRequest(
        member_ids=[sample_member.id, sample_member.id],
        type="balance_info",
        message="Balance",
    )
    logs = notifications_service.send_whatsapp_notifications(db_session, payload, admin_user.id, Gateway())
    assert len(logs) == 1
    assert logs[0].member_id == sample_member.id
