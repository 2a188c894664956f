from supabase import Client
from app.core.soft_delete import select_active, soft_delete
from app.modules.comments.schemas import CommentCreate, CommentUpdate, CommentResponse
from app.modules.profiles.service import fetch_profile_cards
from typing import Any, Dict, List
from fastapi import HTTPException
from datetime import datetime, timezone
import logging

logger = logging.getLogger(__name__)


def to_comment_response(row: Dict[str, Any], cards: Dict[str, dict]) -> CommentResponse:
    return CommentResponse(**row, author=cards.get(row.get("user_id")))


class CommentService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def list_comments(self, laag_id: str) -> List[CommentResponse]:
        """Active comments, oldest first"""
        try:
            result = select_active(self.supabase, "comments")\
                .eq("laag_id", laag_id)\
                .order("created_at", desc=False)\
                .execute()
            rows = result.data or []
            cards = fetch_profile_cards(self.supabase, [r["user_id"] for r in rows])
            return [to_comment_response(r, cards) for r in rows]
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Error listing comments of laag {laag_id}: {e}")
            raise HTTPException(status_code=500, detail="Failed to fetch comments")

    def add_comment(self, laag_id: str, user_id: str, comment_data: CommentCreate) -> CommentResponse:
        try:
            result = self.supabase.table("comments").insert({
                "laag_id": laag_id,
                "user_id": user_id,
                "comment": comment_data.comment.strip(),
                "is_deleted": False
            }).execute()

            if not result.data:
                raise HTTPException(status_code=500, detail="Failed to add comment")

            cards = fetch_profile_cards(self.supabase, [user_id])
            return to_comment_response(result.data[0], cards)
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Error adding comment to laag {laag_id}: {e}")
            raise HTTPException(status_code=500, detail="Failed to add comment")

    def update_comment(self, comment_id: str, comment_data: CommentUpdate) -> CommentResponse:
        try:
            result = self.supabase.table("comments")\
                .update({
                    "comment": comment_data.comment.strip(),
                    "updated_at": datetime.now(timezone.utc).isoformat()
                })\
                .eq("id", comment_id)\
                .execute()

            if not result.data:
                raise HTTPException(status_code=404, detail="Comment not found")

            row = result.data[0]
            cards = fetch_profile_cards(self.supabase, [row["user_id"]])
            return to_comment_response(row, cards)
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Error updating comment {comment_id}: {e}")
            raise HTTPException(status_code=500, detail="Failed to update comment")

    def delete_comment(self, comment_id: str) -> bool:
        try:
            updated = soft_delete(self.supabase, "comments", [comment_id])
            if not updated:
                raise HTTPException(status_code=404, detail="Comment not found")
            return True
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Error deleting comment {comment_id}: {e}")
            raise HTTPException(status_code=500, detail="Failed to delete comment")
