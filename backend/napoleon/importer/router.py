"""Import API routes."""

from fastapi import APIRouter, Depends, HTTPException, UploadFile

from napoleon.importer.parsers.detection import ImportFormatError
from napoleon.importer.schemas import ImportResponse
from napoleon.importer.service import ImportService
from napoleon.models import ChatImportResult

router = APIRouter(prefix="/api/import", tags=["import"])


def get_import_service() -> ImportService:
    """Dependency placeholder, overridden at startup."""
    raise RuntimeError("ImportService not configured")


@router.post("/preview")
async def preview_import(
    file: UploadFile,
    service: ImportService = Depends(get_import_service),
) -> ChatImportResult:
    """Parse uploaded file and return reconstructed chats without storing them."""
    content = await file.read()
    try:
        return await service.preview(content, file.filename or "unknown")
    except ImportFormatError as e:
        raise HTTPException(status_code=422, detail=str(e)) from e


@router.post("")
async def import_chats(
    file: UploadFile,
    service: ImportService = Depends(get_import_service),
) -> ImportResponse:
    """Import conversations from uploaded file into the chat list."""
    content = await file.read()
    try:
        return await service.import_chats(content, file.filename or "unknown")
    except ImportFormatError as e:
        raise HTTPException(status_code=422, detail=str(e)) from e
