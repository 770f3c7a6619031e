"""Request and response schemas for the share inbox endpoints."""

from datetime import datetime

from pydantic import BaseModel

from napoleon.models import ShareInboxItem

# -- Requests --


class PatchShareItemRequest(BaseModel):
    """Fields to update on an inbox item. Absent fields are left unchanged.

    `status` and `action` are validated by the route so bad values get a 400
    with the allowed list instead of a schema error.
    """

    id: str | None = None
    status: str | None = None
    source: str | None = None
    title: str | None = None
    content: str | None = None
    url: str | None = None
    author: str | None = None
    tags: list[str] | str | None = None
    action: str | None = None
    note: str | None = None


class DeleteShareItemRequest(BaseModel):
    id: str | None = None


# -- Responses --


class ShareInboxListResponse(BaseModel):
    generated_at: datetime
    counts: dict[str, int]
    items: list[ShareInboxItem]
    share_endpoint: str = "/api/share/inbox"


class ShareItemResponse(BaseModel):
    ok: bool = True
    item: ShareInboxItem


class MoveToChatResponse(BaseModel):
    ok: bool = True
    item: ShareInboxItem
    chat_id: str


class OkResponse(BaseModel):
    ok: bool = True
