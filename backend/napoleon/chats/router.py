"""Chat list API routes."""

from fastapi import APIRouter, Depends, HTTPException

from napoleon.chats.schemas import ChatSummary
from napoleon.chats.store import ChatStore
from napoleon.models import Chat

router = APIRouter(prefix="/api/chats", tags=["chats"])


def get_chat_store() -> ChatStore:
    """Dependency placeholder, overridden at startup."""
    raise RuntimeError("ChatStore not configured")


@router.get("")
async def list_chats(store: ChatStore = Depends(get_chat_store)) -> list[ChatSummary]:
    return await store.list_chats()


@router.get("/{chat_id}")
async def get_chat(chat_id: str, store: ChatStore = Depends(get_chat_store)) -> Chat:
    chat = await store.get_chat(chat_id)
    if chat is None:
        raise HTTPException(status_code=404, detail=f"Chat not found: {chat_id}")
    return chat
