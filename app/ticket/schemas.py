# app/ticket/schemas.py
from datetime import datetime
from enum import Enum
from typing import Annotated

from pydantic import AfterValidator, AnyUrl, BaseModel, ConfigDict, Field, TypeAdapter, field_validator
from pydantic import ValidationError as PydanticValidationError
from pydantic.alias_generators import to_camel


class TicketCategory(str, Enum):
    BILLING = "billing"
    TECH = "tech"
    SHIPPING = "shipping"
    OTHER = "other"


class TicketStatus(str, Enum):
    OPEN = "open"
    WAITING_HUMAN = "waiting_human"
    RESOLVED = "resolved"
    CLOSED = "closed"


class ReplyStatus(str, Enum):
    """Statuses an agent may move a ticket to while replying."""

    RESOLVED = "resolved"
    CLOSED = "closed"
    WAITING_HUMAN = "waiting_human"


_URL_ADAPTER = TypeAdapter(AnyUrl)


def _check_uri(value: str) -> str:
    # Validate as a URI but keep the caller's spelling
    try:
        _URL_ADAPTER.validate_python(value)
    except PydanticValidationError:
        raise ValueError("must be a well-formed URI") from None
    return value


AttachmentUrl = Annotated[str, AfterValidator(_check_uri)]


class CamelModel(BaseModel):
    # camelCase on the wire, snake_case attributes
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class TicketCreate(CamelModel):
    model_config = ConfigDict(extra="forbid")

    title: str = Field(..., min_length=5, max_length=200)
    description: str = Field(..., min_length=10, max_length=2000)
    category: TicketCategory = TicketCategory.OTHER
    attachment_urls: list[AttachmentUrl] = Field(default_factory=list)

    @field_validator("category", mode="before")
    @classmethod
    def lowercase_category(cls, value):
        if isinstance(value, str):
            return value.lower()
        return value


class ReplyCreate(CamelModel):
    model_config = ConfigDict(extra="forbid")

    content: str = Field(..., min_length=5, max_length=2000)
    change_status: ReplyStatus | None = None


class ReplyOut(CamelModel):
    id: int
    content: str
    is_agent: bool
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class TicketOut(CamelModel):
    id: str
    title: str
    description: str
    category: TicketCategory
    status: TicketStatus
    created_by: str | None = None
    attachment_urls: list[str] = []
    replies: list[ReplyOut] = []
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class TicketEnvelope(BaseModel):
    ticket: TicketOut


class Pagination(BaseModel):
    page: int
    limit: int
    total: int
    pages: int


class TicketPage(BaseModel):
    tickets: list[TicketOut]
    pagination: Pagination
