# jdqna/services/storage_service.py
import logging
import os
import secrets
from typing import Optional

from supabase import create_client

from jdqna.config import settings
from jdqna.services.errors import StorageError

logger = logging.getLogger("jdqna.storage")


def build_object_key(filename: Optional[str], folder: Optional[str] = None) -> str:
    """<folder>/<32자리 hex>.<확장자>"""
    folder = (folder or settings.upload_folder).strip("/")
    ext = os.path.splitext(filename or "")[1].lstrip(".").lower()
    name = secrets.token_hex(16)
    if ext:
        name = f"{name}.{ext}"
    return f"{folder}/{name}" if folder else name


class StorageService:
    """Supabase Storage 업로드 (공개 버킷)"""

    def __init__(self, client=None, bucket: Optional[str] = None):
        if client is None:
            if not settings.supabase_url or not settings.supabase_service_role_key:
                raise StorageError("SUPABASE_URL and SUPABASE_SERVICE_ROLE_KEY must be set")
            client = create_client(settings.supabase_url, settings.supabase_service_role_key)
        self.client = client
        self.bucket = bucket or settings.supabase_upload_bucket

    def upload_bytes(self, data: bytes, filename: Optional[str], content_type: Optional[str] = None) -> str:
        """
        바이트를 업로드하고 공개 URL 반환
        """
        key = build_object_key(filename)
        try:
            self.client.storage.from_(self.bucket).upload(key, data, {
                "content-type": content_type or "application/octet-stream",
                "upsert": "false",
            })
        except Exception as e:
            logger.exception("upload failed: %s", key)
            raise StorageError(f"Failed to upload file: {e}") from e

        url = self.client.storage.from_(self.bucket).get_public_url(key)
        logger.info("uploaded %s (%d bytes)", key, len(data))
        return url
