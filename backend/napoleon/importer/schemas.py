"""Pydantic schemas for the import API."""

from pydantic import BaseModel

from napoleon.chats.schemas import ChatSummary
from napoleon.models import ChatImportSource


class ImportResponse(BaseModel):
    source: ChatImportSource
    imported: int
    duplicates: int
    warnings: list[str]
    chats: list[ChatSummary]
