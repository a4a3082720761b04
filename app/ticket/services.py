# app/ticket/services.py
import uuid
from contextlib import contextmanager

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.database import utcnow
from app.core.exceptions import NotFoundError, StorageError
from app.core.logging import setup_logger
from app.ticket.models import Reply, Ticket
from app.ticket.schemas import ReplyCreate, TicketCreate, TicketStatus

logger = setup_logger(__name__)


@contextmanager
def _storage(db: Session, action: str):
    """Roll back and re-raise store failures as StorageError."""
    try:
        yield
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception("Storage failure while trying to %s", action)
        raise StorageError(detail=str(exc)) from exc


def _save(db: Session, ticket: Ticket, action: str) -> Ticket:
    with _storage(db, action):
        db.add(ticket)
        db.commit()
        db.refresh(ticket)
    return ticket


def create_ticket(db: Session, payload: TicketCreate) -> Ticket:
    ticket = Ticket(
        title=payload.title,
        description=payload.description,
        category=payload.category.value,
        status=TicketStatus.OPEN.value,
        created_by=None,
        attachment_urls=list(payload.attachment_urls),
    )
    _save(db, ticket, "create ticket")
    logger.info("Created ticket %s (category=%s)", ticket.id, ticket.category)
    return ticket


def list_tickets(
    db: Session, status: str | None = None, page: int = 1, limit: int = 20
) -> tuple[list[Ticket], int]:
    """Return one page of tickets, newest first, and the total match count.

    The status filter is compared as a plain string, so unknown values simply
    match nothing.
    """
    query = db.query(Ticket)
    if status:
        query = query.filter(Ticket.status == status)
    offset = (page - 1) * limit
    with _storage(db, "list tickets"):
        total = query.count()
        # Pages past the end never reach the store; huge offsets overflow its integers
        if offset >= total:
            return [], total
        items = (
            query.order_by(Ticket.created_at.desc())
            .offset(offset)
            .limit(limit)
            .all()
        )
    return items, total


def get_ticket(db: Session, ticket_id: str) -> Ticket:
    # Ids are UUIDs; anything else cannot exist in the store
    try:
        key = str(uuid.UUID(ticket_id))
    except (TypeError, ValueError):
        raise NotFoundError() from None
    with _storage(db, "load ticket"):
        ticket = db.query(Ticket).filter(Ticket.id == key).first()
    if ticket is None:
        raise NotFoundError()
    return ticket


def add_reply(db: Session, ticket_id: str, payload: ReplyCreate) -> Ticket:
    ticket = get_ticket(db, ticket_id)
    ticket.replies.append(Reply(content=payload.content, is_agent=True))
    if payload.change_status is not None:
        ticket.status = payload.change_status.value
    ticket.updated_at = utcnow()
    _save(db, ticket, "add reply")
    logger.info("Reply added to ticket %s (status=%s)", ticket.id, ticket.status)
    return ticket


def assign_ticket(db: Session, ticket_id: str) -> Ticket:
    """Escalate a ticket to a human agent. No assignee is recorded."""
    ticket = get_ticket(db, ticket_id)
    ticket.status = TicketStatus.WAITING_HUMAN.value
    ticket.updated_at = utcnow()
    _save(db, ticket, "assign ticket")
    logger.info("Ticket %s assigned (status=%s)", ticket.id, ticket.status)
    return ticket
