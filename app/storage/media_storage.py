"""Blob storage for laag photos, group pictures and avatars.

Objects are addressed by (bucket, path); only the path is persisted in the
image / group_picture / avatar_url columns. Supabase Storage is the default
backend, S3 is used when AWS credentials and a bucket are configured.
"""

import logging
import os
import uuid
from typing import Optional

from supabase import Client

from app.config import settings
from app.storage.s3_storage import S3Storage

logger = logging.getLogger(__name__)


def file_extension(filename: Optional[str], default: str = "jpg") -> str:
    """Extension after the last dot, without the dot"""
    ext = os.path.splitext(filename or "")[1].lstrip(".").lower()
    return ext or default


def laag_image_path(laag_id: str, filename: Optional[str]) -> str:
    return f"{laag_id}/{uuid.uuid4()}.{file_extension(filename)}"


class MediaStorage:
    def __init__(self, supabase: Client):
        self.supabase = supabase
        self.s3_storage = None
        if settings.s3_configured:
            try:
                self.s3_storage = S3Storage()
            except Exception as e:
                logger.warning(f"S3 storage initialization failed ({str(e)}), will use Supabase Storage")
                self.s3_storage = None

    def upload(self, bucket: str, path: str, content: bytes, content_type: Optional[str] = None) -> str:
        """Store content and return the path to persist"""
        content_type = content_type or "application/octet-stream"
        if self.s3_storage:
            logger.info(f"Uploading to S3: {bucket}/{path}")
            self.s3_storage.upload_file(content, f"{bucket}/{path}", content_type)
        else:
            logger.info(f"Uploading to Supabase Storage: {bucket}/{path}")
            self.supabase.storage.from_(bucket).upload(
                path,
                content,
                file_options={"content-type": content_type}
            )
        return path

    def signed_url(self, bucket: str, path: Optional[str]) -> Optional[str]:
        """Short-lived URL for a stored path; None when the path is empty or signing fails"""
        if not path:
            return None
        expires_in = settings.signed_url_expires_in
        if self.s3_storage:
            return self.s3_storage.presigned_url(f"{bucket}/{path}", expires_in)
        try:
            result = self.supabase.storage.from_(bucket).create_signed_url(path, expires_in)
        except Exception as e:
            logger.warning(f"Failed to sign {bucket}/{path}: {e}")
            return None
        if isinstance(result, dict):
            return result.get("signedURL") or result.get("signedUrl")
        return None
