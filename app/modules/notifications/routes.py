from fastapi import APIRouter, Depends
from sse_starlette.sse import EventSourceResponse
from app.database.supabase_client import get_supabase
from app.modules.notifications import stream
from app.modules.notifications.schemas import (
    NotificationResponse, UnreadCountResponse, MarkAllReadResponse, NotificationHistoryItem
)
from app.modules.notifications.service import NotificationService
from app.core.dependencies import authorize, get_current_user_id, require_permission
from supabase import Client
from typing import Dict, List

router = APIRouter(prefix="/notifications", tags=["notifications"])


def get_notification_service(supabase: Client = Depends(get_supabase)) -> NotificationService:
    return NotificationService(supabase)


@router.get("", response_model=List[NotificationResponse])
async def list_notifications(
    current_user: Dict = Depends(get_current_user_id),
    service: NotificationService = Depends(get_notification_service)
):
    return service.list_for_user(current_user["id"])


@router.get("/unread-count", response_model=UnreadCountResponse)
async def unread_count(
    current_user: Dict = Depends(get_current_user_id),
    service: NotificationService = Depends(get_notification_service)
):
    return service.unread_count(current_user["id"])


@router.post("/read-all", response_model=MarkAllReadResponse)
async def mark_all_read(
    current_user: Dict = Depends(get_current_user_id),
    service: NotificationService = Depends(get_notification_service)
):
    return service.mark_all_read(current_user["id"])


@router.get("/stream")
async def notification_stream(current_user: Dict = Depends(get_current_user_id)):
    """Server-sent events: one "notification" event per new read row for the caller"""
    return EventSourceResponse(stream.event_generator(current_user["id"]))


@router.get("/history", response_model=List[NotificationHistoryItem])
async def notification_history(
    limit: int = 50,
    current_user: Dict = Depends(require_permission("notifications:history")),
    service: NotificationService = Depends(get_notification_service)
):
    """Recent notifications across all groups (admin only)"""
    return service.history(limit=limit)


@router.post("/{read_id}/read", response_model=NotificationResponse)
async def mark_read(
    read_id: str,
    current_user: Dict = Depends(get_current_user_id),
    service: NotificationService = Depends(get_notification_service),
    supabase: Client = Depends(get_supabase)
):
    authorize("notifications:read", current_user, supabase, read_id)
    return service.mark_read(read_id)
