"""Pydantic schemas for the chat list API."""

from datetime import datetime

from pydantic import BaseModel


class ChatSummary(BaseModel):
    chat_id: str
    title: str
    source: str
    message_count: int
    created_at: datetime
    updated_at: datetime
