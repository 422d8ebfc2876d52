from __future__ import annotations

from pathlib import PurePath

from fastapi import APIRouter, Depends, File, UploadFile

from contentforge.dependencies import get_storage
from contentforge.errors import ValidationError
from contentforge.log_config import logger
from contentforge.schema import UploadResponse
from contentforge.storage import CloudinaryStorage

router = APIRouter(prefix="/api", tags=["upload"])


@router.post("/upload", response_model=UploadResponse)
async def upload_file(
    file: UploadFile = File(...),
    storage: CloudinaryStorage = Depends(get_storage),
) -> UploadResponse:
    data = await file.read()
    if not data:
        raise ValidationError("No file provided")
    filename = PurePath(file.filename or "upload").name
    logger.info("upload request filename=%s bytes=%d", filename, len(data))
    result = await storage.upload(data, filename)
    return UploadResponse(secure_url=result.secure_url, public_id=result.public_id)
