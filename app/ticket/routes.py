# app/ticket/routes.py
import math

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from app.core.database import get_db
from app.core.config import get_settings, Settings
from app.ticket.schemas import ReplyCreate, TicketCreate, TicketEnvelope, TicketPage
from app.ticket import services as ticket_service

router = APIRouter(prefix="/tickets", tags=["Tickets"])


def _positive_int(raw: str | None, default: int) -> int:
    # Malformed or non-positive values fall back to the default
    try:
        value = int(raw) if raw is not None else default
    except ValueError:
        return default
    return value if value > 0 else default


@router.post("", response_model=TicketEnvelope, status_code=201)
@router.post("/", response_model=TicketEnvelope, status_code=201, include_in_schema=False)
def create(ticket: TicketCreate, db: Session = Depends(get_db)):
    return {"ticket": ticket_service.create_ticket(db, ticket)}


@router.get("", response_model=TicketPage)
@router.get("/", response_model=TicketPage, include_in_schema=False)
def list_all(
    status: str | None = Query(default=None, description="Filter by status, e.g. open or waiting_human"),
    page: str | None = Query(default=None, description="1-based page number"),
    limit: str | None = Query(default=None, description="Page size"),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    page_no = _positive_int(page, 1)
    page_size = min(_positive_int(limit, settings.DEFAULT_PAGE_SIZE), settings.MAX_PAGE_SIZE)

    items, total = ticket_service.list_tickets(db, status=status, page=page_no, limit=page_size)
    return {
        "tickets": items,
        "pagination": {
            "page": page_no,
            "limit": page_size,
            "total": total,
            "pages": math.ceil(total / page_size),
        },
    }


@router.get("/{ticket_id}", response_model=TicketEnvelope)
def get(ticket_id: str, db: Session = Depends(get_db)):
    return {"ticket": ticket_service.get_ticket(db, ticket_id)}


@router.post("/{ticket_id}/reply", response_model=TicketEnvelope)
def reply(ticket_id: str, payload: ReplyCreate, db: Session = Depends(get_db)):
    return {"ticket": ticket_service.add_reply(db, ticket_id, payload)}


@router.post("/{ticket_id}/assign", response_model=TicketEnvelope)
def assign(ticket_id: str, db: Session = Depends(get_db)):
    return {"ticket": ticket_service.assign_ticket(db, ticket_id)}
