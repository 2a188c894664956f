from fastapi import APIRouter, Depends, File, UploadFile
from app.database.supabase_client import get_supabase
from app.modules.images.schemas import ImageResponse
from app.modules.images.service import ImageService, check_batch_size
from app.core.dependencies import authorize, get_current_user_id
from supabase import Client
from typing import Dict, List

router = APIRouter(prefix="/laags", tags=["images"])


def get_image_service(supabase: Client = Depends(get_supabase)) -> ImageService:
    return ImageService(supabase)


@router.get("/{laag_id}/images", response_model=List[ImageResponse])
async def list_images(
    laag_id: str,
    current_user: Dict = Depends(get_current_user_id),
    service: ImageService = Depends(get_image_service),
    supabase: Client = Depends(get_supabase)
):
    authorize("laags:read", current_user, supabase, laag_id)
    return service.list_images(laag_id)


@router.post("/{laag_id}/images", response_model=List[ImageResponse], status_code=201)
async def upload_images(
    laag_id: str,
    files: List[UploadFile] = File(...),
    current_user: Dict = Depends(get_current_user_id),
    service: ImageService = Depends(get_image_service),
    supabase: Client = Depends(get_supabase)
):
    """Upload laag photos (organizer only, at most 9 per request)"""
    authorize("laags:upload_images", current_user, supabase, laag_id)
    check_batch_size(len(files))
    payload = [
        {"filename": f.filename, "content": await f.read(), "content_type": f.content_type}
        for f in files
    ]
    return service.upload_images(laag_id, payload)


@router.delete("/{laag_id}/images/{image_id}", status_code=204)
async def delete_image(
    laag_id: str,
    image_id: str,
    current_user: Dict = Depends(get_current_user_id),
    service: ImageService = Depends(get_image_service),
    supabase: Client = Depends(get_supabase)
):
    authorize("laags:upload_images", current_user, supabase, laag_id)
    service.delete_image(laag_id, image_id)
    return None
