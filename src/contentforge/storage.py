from __future__ import annotations

import asyncio
import io
import time
from typing import Any

import cloudinary.uploader
from cloudinary.exceptions import Error as CloudinaryError
from pydantic import BaseModel

from contentforge.errors import UpstreamError
from contentforge.log_config import logger


class UploadResult(BaseModel):
    secure_url: str
    public_id: str


class CloudinaryStorage:
    """Upload raw files to Cloudinary with the account's upload preset.

    Credentials travel with each call instead of through the SDK's global
    config.
    """

    def __init__(self, cloud_name: str, api_key: str, api_secret: str, upload_preset: str):
        self.credentials = {
            "cloud_name": cloud_name,
            "api_key": api_key,
            "api_secret": api_secret,
        }
        self.upload_preset = upload_preset

    def _upload_sync(self, data: bytes, public_id: str) -> dict[str, Any]:
        return cloudinary.uploader.upload(
            io.BytesIO(data),
            resource_type="raw",
            public_id=public_id,
            upload_preset=self.upload_preset,
            overwrite=True,
            type="upload",
            access_mode="public",
            secure=True,
            **self.credentials,
        )

    async def upload(self, data: bytes, filename: str) -> UploadResult:
        public_id = f"{int(time.time() * 1000)}-{filename}"
        logger.info("Uploading file public_id=%s bytes=%d", public_id, len(data))
        try:
            result = await asyncio.to_thread(self._upload_sync, data, public_id)
        except CloudinaryError as exc:
            logger.error("Cloudinary upload failed: %s", exc)
            raise UpstreamError("Cloudinary upload failed", details={"cause": str(exc)}) from exc
        return UploadResult(secure_url=result["secure_url"], public_id=result["public_id"])
