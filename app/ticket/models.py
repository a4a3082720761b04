# app/ticket/models.py
import uuid

from sqlalchemy import JSON, Boolean, Column, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship

from app.core.database import Base, UTCDateTime, utcnow


def _new_id() -> str:
    return str(uuid.uuid4())


class Ticket(Base):
    __tablename__ = "tickets"

    id = Column(String(36), primary_key=True, default=_new_id)
    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=False)
    category = Column(String(20), nullable=False, default="other", index=True)
    status = Column(String(20), nullable=False, default="open", index=True)
    created_by = Column(String(36), nullable=True)
    attachment_urls = Column(JSON, nullable=False, default=list)

    created_at = Column(UTCDateTime, nullable=False, default=utcnow, index=True)
    updated_at = Column(UTCDateTime, nullable=False, default=utcnow)

    replies = relationship(
        "Reply",
        back_populates="ticket",
        order_by="Reply.id",
        cascade="all, delete-orphan",
        lazy="selectin",
    )


class Reply(Base):
    __tablename__ = "ticket_replies"

    id = Column(Integer, primary_key=True, autoincrement=True)
    ticket_id = Column(String(36), ForeignKey("tickets.id"), nullable=False, index=True)
    content = Column(Text, nullable=False)
    is_agent = Column(Boolean, nullable=False, default=True)
    created_at = Column(UTCDateTime, nullable=False, default=utcnow)

    ticket = relationship("Ticket", back_populates="replies")
