"""Share inbox API routes."""

from datetime import UTC, datetime
from typing import get_args

from fastapi import APIRouter, Body, Depends, HTTPException, Query, Request, status

from napoleon.models import (
    SHARE_INBOX_STATUSES,
    ShareActionType,
    ShareHistoryInput,
    UpdateShareItem,
)
from napoleon.share.payload import ShareContentMissingError
from napoleon.share.schemas import (
    DeleteShareItemRequest,
    MoveToChatResponse,
    OkResponse,
    PatchShareItemRequest,
    ShareInboxListResponse,
    ShareItemResponse,
)
from napoleon.share.service import ShareInboxService
from napoleon.share.store import ShareItemNotFoundError
from napoleon.share.tags import parse_tags

router = APIRouter(prefix="/api/share/inbox", tags=["share"])

_ACTIONS = get_args(ShareActionType)


def get_share_service() -> ShareInboxService:
    """Dependency placeholder, overridden at startup."""
    raise RuntimeError("ShareInboxService not configured")


@router.get("")
async def list_items(
    status_filter: str | None = Query(None, alias="status"),
    service: ShareInboxService = Depends(get_share_service),
) -> ShareInboxListResponse:
    if status_filter in (None, "", "all"):
        wanted = None
    elif status_filter in SHARE_INBOX_STATUSES:
        wanted = status_filter
    else:
        raise HTTPException(
            status_code=400,
            detail=f"Некорректный статус. Используйте: all, {', '.join(SHARE_INBOX_STATUSES)}",
        )

    return ShareInboxListResponse(
        generated_at=datetime.now(UTC),
        counts=await service.counts(),
        items=await service.list_items(wanted),
    )


@router.post("", status_code=status.HTTP_201_CREATED)
async def submit_item(
    request: Request,
    service: ShareInboxService = Depends(get_share_service),
) -> ShareItemResponse:
    """Accept one arbitrary JSON object from a browser or automation."""
    try:
        body = await request.json()
    except ValueError as e:
        raise HTTPException(status_code=400, detail="Некорректный JSON") from e
    if not isinstance(body, dict):
        raise HTTPException(status_code=400, detail="Ожидается JSON-объект")
    try:
        item = await service.submit(body)
    except ShareContentMissingError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    return ShareItemResponse(item=item)


@router.patch("")
async def update_item(
    request: PatchShareItemRequest,
    service: ShareInboxService = Depends(get_share_service),
) -> ShareItemResponse:
    item_id = (request.id or "").strip()
    if not item_id:
        raise HTTPException(status_code=400, detail="Нужно передать id")
    if request.status is not None and request.status not in SHARE_INBOX_STATUSES:
        raise HTTPException(
            status_code=400,
            detail=f"Некорректный status. Разрешены: {', '.join(SHARE_INBOX_STATUSES)}",
        )
    if request.action is not None and request.action not in _ACTIONS:
        raise HTTPException(
            status_code=400,
            detail=f"Некорректный action. Разрешены: {', '.join(_ACTIONS)}",
        )

    updates = UpdateShareItem(
        source=(request.source or "").strip() or None,
        title=request.title,
        content=request.content,
        url=request.url,
        author=request.author,
        tags=parse_tags(request.tags) if request.tags is not None else None,
        status=request.status,
        history_entry=(
            ShareHistoryInput(type=request.action, note=request.note)
            if request.action
            else None
        ),
    )
    try:
        item = await service.update(item_id, updates)
    except ShareItemNotFoundError as e:
        raise HTTPException(status_code=404, detail="Элемент не найден") from e
    return ShareItemResponse(item=item)


@router.delete("")
async def delete_item(
    query_id: str | None = Query(None, alias="id"),
    body: DeleteShareItemRequest | None = Body(None),
    service: ShareInboxService = Depends(get_share_service),
) -> OkResponse:
    item_id = (query_id or (body.id if body else None) or "").strip()
    if not item_id:
        raise HTTPException(status_code=400, detail="Нужно передать id")
    try:
        await service.remove(item_id)
    except ShareItemNotFoundError as e:
        raise HTTPException(status_code=404, detail="Элемент не найден") from e
    return OkResponse()


@router.post("/{item_id}/to-chat")
async def move_to_chat(
    item_id: str,
    service: ShareInboxService = Depends(get_share_service),
) -> MoveToChatResponse:
    try:
        item, chat = await service.move_to_chat(item_id)
    except ShareItemNotFoundError as e:
        raise HTTPException(status_code=404, detail="Элемент не найден") from e
    return MoveToChatResponse(item=item, chat_id=chat.id)
