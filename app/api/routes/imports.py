from fastapi import APIRouter, Depends, HTTPException, status
import structlog

from app.config.settings import settings
from app.models.importer import FormatVerdict, ParsedDocument
from app.models.schemas import (
    ImportTextRequest, ImportPreviewRequest, ImportPreview, ImportResult
)
from app.services.import_service import (
    ImportService, PreviewNotFoundError, PersistenceUnavailableError
)
from app.core.dependencies import get_import_service

logger = structlog.get_logger()

router = APIRouter(prefix="/imports", tags=["imports"])


def _check_size(text: str) -> None:
    if len(text) > settings.max_import_characters:
        raise HTTPException(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            detail=f"Import text exceeds {settings.max_import_characters} characters"
        )


@router.post("/classify", response_model=FormatVerdict)
async def classify_text(
    request: ImportTextRequest,
    service: ImportService = Depends(get_import_service)
):
    """Detect which structural convention the text follows"""
    _check_size(request.text)
    try:
        return service.classify(request.text)
    except Exception as e:
        logger.error("Failed to classify import text", error=str(e))
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to classify import text"
        )


@router.post("/hierarchical", response_model=ParsedDocument)
async def parse_hierarchical_text(
    request: ImportTextRequest,
    service: ImportService = Depends(get_import_service)
):
    """Parse hierarchical text into sections, subsections and test cases"""
    _check_size(request.text)
    try:
        return service.parse_hierarchical(request.text)
    except Exception as e:
        logger.error("Failed to parse hierarchical text", error=str(e))
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to parse hierarchical text"
        )


@router.post("/preview", response_model=ImportPreview, status_code=status.HTTP_201_CREATED)
async def create_import_preview(
    request: ImportPreviewRequest,
    service: ImportService = Depends(get_import_service)
):
    """Parse the text into records and keep them until the import is confirmed"""
    _check_size(request.text)
    try:
        logger.info("Creating import preview", suite_id=request.suite_id, characters=len(request.text))
        return service.build_preview(request.text, suite_id=request.suite_id, format_hint=request.format)
    except Exception as e:
        logger.error("Failed to create import preview", error=str(e))
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to create import preview"
        )


@router.get("/{preview_id}", response_model=ImportPreview)
async def get_import_preview(
    preview_id: str,
    service: ImportService = Depends(get_import_service)
):
    """Get a pending import preview"""
    try:
        return service.get_preview(preview_id)
    except PreviewNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))


@router.post("/{preview_id}/confirm", response_model=ImportResult, status_code=status.HTTP_201_CREATED)
async def confirm_import(
    preview_id: str,
    service: ImportService = Depends(get_import_service)
):
    """Hand a previewed import to the persistence service"""
    try:
        return await service.confirm_preview(preview_id)
    except PreviewNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except PersistenceUnavailableError as e:
        logger.warning("Import could not be stored", preview_id=preview_id, error=str(e))
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(e))
    except Exception as e:
        logger.error("Failed to confirm import", preview_id=preview_id, error=str(e))
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to confirm import"
        )
