from supabase import Client
from app.config import settings
from app.core.soft_delete import select_active, soft_delete
from app.modules.images.schemas import ImageResponse
from app.storage.media_storage import MediaStorage, laag_image_path
from typing import Any, Dict, List
from fastapi import HTTPException
import logging

logger = logging.getLogger(__name__)


def to_image_response(storage: MediaStorage, row: Dict[str, Any]) -> ImageResponse:
    return ImageResponse(**row, url=storage.signed_url(settings.laag_images_bucket, row.get("image")))


def check_batch_size(count: int) -> None:
    if count == 0:
        raise HTTPException(status_code=400, detail="No images provided")
    if count > settings.max_images_per_upload:
        raise HTTPException(
            status_code=400,
            detail=f"You can upload at most {settings.max_images_per_upload} images at a time"
        )


class ImageService:
    def __init__(self, supabase: Client):
        self.supabase = supabase
        self.storage = MediaStorage(supabase)

    def list_images(self, laag_id: str) -> List[ImageResponse]:
        try:
            result = select_active(self.supabase, "laagImages")\
                .eq("laag_id", laag_id)\
                .order("created_at", desc=False)\
                .execute()
            return [to_image_response(self.storage, row) for row in (result.data or [])]
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Error listing images of laag {laag_id}: {e}")
            raise HTTPException(status_code=500, detail="Failed to fetch images")

    def upload_images(self, laag_id: str, files: List[Dict[str, Any]]) -> List[ImageResponse]:
        """
        Store each file at {laag_id}/{uuid}.{ext} in the laags bucket, then insert its pointer row.
        files: [{"filename", "content", "content_type"}]
        """
        check_batch_size(len(files))
        try:
            uploaded = []
            for f in files:
                path = laag_image_path(laag_id, f.get("filename"))
                self.storage.upload(settings.laag_images_bucket, path, f["content"], f.get("content_type"))
                result = self.supabase.table("laagImages").insert({
                    "laag_id": laag_id,
                    "image": path,
                    "is_deleted": False
                }).execute()
                if not result.data:
                    raise HTTPException(status_code=500, detail="Failed to upload images")
                uploaded.append(to_image_response(self.storage, result.data[0]))
            logger.info(f"Uploaded {len(uploaded)} image(s) to laag {laag_id}")
            return uploaded
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Error uploading images to laag {laag_id}: {e}")
            raise HTTPException(status_code=500, detail="Failed to upload images")

    def delete_image(self, laag_id: str, image_id: str) -> bool:
        """Hide the image; the stored object stays"""
        try:
            result = select_active(self.supabase, "laagImages", "id")\
                .eq("id", image_id)\
                .eq("laag_id", laag_id)\
                .limit(1)\
                .execute()
            if not result.data:
                raise HTTPException(status_code=404, detail="Image not found")
            soft_delete(self.supabase, "laagImages", [image_id])
            return True
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Error deleting image {image_id}: {e}")
            raise HTTPException(status_code=500, detail="Failed to delete image")
