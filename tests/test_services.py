# tests/test_services.py
from datetime import timedelta

import pytest
from sqlalchemy.exc import OperationalError

from app.core.exceptions import NotFoundError, StorageError, ValidationError
from app.ticket import services as ticket_service
from app.ticket.schemas import ReplyCreate, TicketCreate


def _payload(**overrides) -> TicketCreate:
    data = {
        "title": "Refund not received",
        "description": "I was promised a refund two weeks ago",
    }
    data.update(overrides)
    return TicketCreate(**data)


def test_create_ticket_defaults(db):
    ticket = ticket_service.create_ticket(db, _payload())
    assert ticket.id
    assert ticket.status == "open"
    assert ticket.category == "other"
    assert ticket.created_by is None
    assert ticket.replies == []
    assert ticket.created_at is not None
    assert ticket.updated_at is not None


def test_create_ticket_normalizes_category(db):
    ticket = ticket_service.create_ticket(db, _payload(category="Billing"))
    assert ticket.category == "billing"


def test_schema_accepts_snake_case_names():
    payload = TicketCreate(
        title="Broken charger",
        description="The charger stopped working after a day",
        attachment_urls=["https://example.com/photo.jpg"],
    )
    assert payload.attachment_urls == ["https://example.com/photo.jpg"]


def test_list_tickets_returns_total_and_window(db):
    for i in range(4):
        ticket_service.create_ticket(db, _payload(title=f"Refund request {i}"))

    items, total = ticket_service.list_tickets(db, page=2, limit=3)
    assert total == 4
    assert len(items) == 1
    assert items[0].title == "Refund request 0"


def test_list_tickets_past_last_page(db):
    ticket_service.create_ticket(db, _payload())

    items, total = ticket_service.list_tickets(db, page=10**20, limit=20)
    assert items == []
    assert total == 1


def test_timestamps_are_utc_aware(db):
    ticket = ticket_service.create_ticket(db, _payload())
    db.expire_all()
    reloaded = ticket_service.get_ticket(db, ticket.id)
    assert reloaded.created_at.utcoffset() == timedelta(0)
    assert reloaded.updated_at.utcoffset() == timedelta(0)


def test_attachment_urls_keep_caller_spelling(db):
    ticket = ticket_service.create_ticket(db, _payload(attachmentUrls=["https://Example.com"]))
    assert ticket.attachment_urls == ["https://Example.com"]


def test_get_ticket_unknown_id(db):
    with pytest.raises(NotFoundError):
        ticket_service.get_ticket(db, "6f1c2b1e-3d4a-4c5b-9e8f-0a1b2c3d4e5f")


def test_get_ticket_malformed_id(db):
    with pytest.raises(NotFoundError):
        ticket_service.get_ticket(db, "12345")


def test_get_ticket_accepts_uppercase_id(db):
    ticket = ticket_service.create_ticket(db, _payload())
    assert ticket_service.get_ticket(db, ticket.id.upper()).id == ticket.id


def test_add_reply_appends_agent_reply(db):
    ticket = ticket_service.create_ticket(db, _payload())
    before = ticket.updated_at

    updated = ticket_service.add_reply(
        db, ticket.id, ReplyCreate(content="Refund issued today", changeStatus="resolved")
    )
    assert len(updated.replies) == 1
    assert updated.replies[0].is_agent is True
    assert updated.replies[0].content == "Refund issued today"
    assert updated.status == "resolved"
    assert updated.updated_at >= before


def test_assign_ticket_from_closed(db):
    ticket = ticket_service.create_ticket(db, _payload())
    ticket_service.add_reply(db, ticket.id, ReplyCreate(content="Closing as duplicate", change_status="closed"))

    assigned = ticket_service.assign_ticket(db, ticket.id)
    assert assigned.status == "waiting_human"


def test_assign_unknown_ticket(db):
    with pytest.raises(NotFoundError):
        ticket_service.assign_ticket(db, "6f1c2b1e-3d4a-4c5b-9e8f-0a1b2c3d4e5f")


def test_failed_reply_is_rolled_back(db, monkeypatch):
    ticket = ticket_service.create_ticket(db, _payload())

    def fail():
        raise OperationalError("UPDATE tickets", {}, Exception("database is locked"))

    monkeypatch.setattr(db, "commit", fail)
    with pytest.raises(StorageError) as excinfo:
        ticket_service.add_reply(db, ticket.id, ReplyCreate(content="This reply is lost"))
    assert excinfo.value.status_code == 500
    assert excinfo.value.message == "Internal server error"
    assert "database is locked" in excinfo.value.detail

    monkeypatch.undo()
    reloaded = ticket_service.get_ticket(db, ticket.id)
    assert reloaded.replies == []
    assert reloaded.status == "open"


def test_validation_error_keeps_first_violation():
    error = ValidationError.from_errors(
        [
            {"loc": ("body", "title"), "msg": "String should have at least 5 characters"},
            {"loc": ("body", "description"), "msg": "Field required"},
        ]
    )
    assert error.status_code == 400
    assert error.message == "title: String should have at least 5 characters"


def test_validation_error_without_location():
    assert ValidationError.from_errors([{"loc": ("body",), "msg": "Field required"}]).message == "Field required"
    assert ValidationError.from_errors([]).message == "Invalid request"
