import logging

from fastapi import APIRouter, File, UploadFile

from src.core.config import settings
from src.core.exceptions import BadRequestError, PayloadTooLargeError
from src.core.file_validation import UploadErrorKind, validate_upload
from src.models.dto.upload import UploadVerificationResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/uploads", tags=["uploads"])


@router.post("/verify", response_model=UploadVerificationResponse)
async def verify_upload(file: UploadFile = File(...)):
    """Check a receipt upload's bytes against its declared content type.

    Nothing is stored; callers persist the file only after a 200.
    """
    filename = file.filename or "upload"
    content = await file.read()

    result = validate_upload(
        content,
        file.content_type,
        filename=filename,
        max_size=settings.max_receipt_size_bytes,
    )
    if not result.success:
        logger.info(
            "Rejected upload %r: %s", filename, result.error_kind.value,
        )
        if result.error_kind is UploadErrorKind.TOO_LARGE:
            raise PayloadTooLargeError(result.error_message)
        raise BadRequestError(result.error_message)

    return UploadVerificationResponse(
        filename=filename,
        content_type=result.canonical_type,
        size_bytes=len(content),
    )
