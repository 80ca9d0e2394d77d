import logging

from fastapi import APIRouter, Depends, File, Request, UploadFile

from app.api.deps import get_current_user, get_services
from app.core.errors import ValidationError
from app.core.rate_limit import rate_limit
from app.core.security import SessionUser
from app.core.services import AppServices
from app.schemas.resume import ExtractTextResponse, ResumeUploadResponse

logger = logging.getLogger(__name__)

router = APIRouter()

NOT_A_RESUME_MESSAGE = "This document does not appear to be a resume or CV. Please upload a proper resume."
READ_CHUNK_BYTES = 1024 * 64


async def _read_upload(file: UploadFile | None, max_bytes: int) -> bytes:
    """Read at most one byte past ``max_bytes`` so oversized files are rejected without buffering them."""
    if file is None:
        raise ValidationError("No file provided")
    chunks: list[bytes] = []
    total = 0
    while total <= max_bytes:
        chunk = await file.read(min(READ_CHUNK_BYTES, max_bytes + 1 - total))
        if not chunk:
            break
        total += len(chunk)
        chunks.append(chunk)
    return b"".join(chunks)


@router.post("/resume/extract-text", response_model=ExtractTextResponse)
async def extract_text(
    file: UploadFile | None = File(default=None),
    services: AppServices = Depends(get_services),
):
    extractor = services.text_extractor
    content = await _read_upload(file, extractor.max_size_bytes)
    filename = file.filename or "resume.pdf"
    result = await extractor.extract(filename, file.content_type, content)
    return ExtractTextResponse(text=result.text, filename=filename, file_size=len(content))


@router.post("/resume/upload", response_model=ResumeUploadResponse)
@rate_limit()
async def upload_resume(
    request: Request,
    file: UploadFile | None = File(default=None),
    user: SessionUser = Depends(get_current_user),
    services: AppServices = Depends(get_services),
):
    _ = request
    extractor = services.upload_extractor
    content = await _read_upload(file, extractor.max_size_bytes)
    filename = file.filename or "resume.pdf"
    result = await extractor.extract(filename, file.content_type, content)
    if result.used_fallback:
        raise ValidationError("Failed to parse PDF: text could not be extracted from this file")

    validation = await services.classifier.classify(result.text)
    logger.info(
        "resume_upload_classified user_id=%s is_resume=%s confidence=%s",
        user.user_id,
        validation.is_resume,
        validation.confidence,
    )
    if not validation.is_resume:
        raise ValidationError(
            NOT_A_RESUME_MESSAGE,
            details={"validation": validation.model_dump(mode="json", by_alias=True)},
        )
    return ResumeUploadResponse(resume_text=result.text, filename=filename, validation=validation)
