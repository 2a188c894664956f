from supabase import Client
from app.core import listing
from app.core.soft_delete import select_active
from app.modules.analytics import aggregation
from app.modules.analytics.schemas import (
    LeaderboardEntry, LeaderboardResponse, GroupAnalyticsResponse, DashboardResponse, GroupLaagStats
)
from app.modules.laags.constants import PLANNING, COMPLETED, CANCELLED, LAAG_STATUSES
from app.modules.profiles.service import fetch_profile_cards
from typing import Optional
from fastapi import HTTPException
import logging

logger = logging.getLogger(__name__)


def _check_period(period: str) -> None:
    if period not in aggregation.PERIODS:
        raise HTTPException(status_code=400, detail=f"period must be one of {', '.join(aggregation.PERIODS)}")


class AnalyticsService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def leaderboard(self, search: Optional[str] = None, limit: int = 5) -> LeaderboardResponse:
        """Profiles ranked by number of laags attended; limit grows with "show more" in the client"""
        try:
            rows = select_active(self.supabase, "laagAttendees", "laag_id, attendee_id, is_removed").execute().data or []
            laag_ids = sorted({r["laag_id"] for r in rows})
            live = set()
            if laag_ids:
                live = {
                    laag["id"] for laag in (select_active(self.supabase, "laags", "id")
                                            .in_("id", laag_ids)
                                            .execute().data or [])
                }
            rows = [r for r in rows if r["laag_id"] in live]

            cards = {}
            attendee_ids = sorted({r["attendee_id"] for r in rows})
            if attendee_ids:
                profiles = select_active(self.supabase, "profiles", "id")\
                    .in_("id", attendee_ids)\
                    .execute().data or []
                cards = fetch_profile_cards(self.supabase, [p["id"] for p in profiles])

            board = aggregation.build_leaderboard(rows, cards)
            ranked = [{**entry, "rank": i + 1} for i, entry in enumerate(board)]
            matched = [LeaderboardEntry(**entry) for entry in listing.search(ranked, search, ["full_name"])]
            return LeaderboardResponse(
                entries=matched[:max(limit, 0)],
                total=len(matched),
                has_more=len(matched) > limit
            )
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Error building leaderboard: {e}")
            raise HTTPException(status_code=500, detail="Failed to load leaderboard")

    def group_analytics(self, group_id: str, period: str = "all-time") -> GroupAnalyticsResponse:
        """Activity and spending per time bucket, plus type and status distribution of the group's laags"""
        _check_period(period)
        try:
            laags = select_active(self.supabase, "laags")\
                .eq("group_id", group_id)\
                .execute().data or []
            in_window = aggregation.in_period(laags, "when_start", period)
            completed = [laag for laag in in_window if laag.get("status") == COMPLETED]
            return GroupAnalyticsResponse(
                group_id=group_id,
                period=period,
                activity=aggregation.bucket_series(in_window, "when_start", period),
                spending=aggregation.bucket_series(completed, "when_start", period, value_field="actual_cost"),
                types=aggregation.distribution(laags, "type"),
                statuses=aggregation.distribution(laags, "status")
            )
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Error loading analytics for group {group_id}: {e}")
            raise HTTPException(status_code=500, detail="Failed to load analytics")

    def dashboard(self, period: str = "all-time") -> DashboardResponse:
        """Admin overview: active users, groups created and laag status counts in the period, per-group stats"""
        _check_period(period)
        try:
            users = select_active(self.supabase, "profiles", "id, role").execute().data or []
            groups = select_active(self.supabase, "groups", "id, group_name, created_at").execute().data or []
            laags = select_active(self.supabase, "laags", "id, group_id, status, created_at").execute().data or []

            groups_in_window = aggregation.in_period(groups, "created_at", period)
            laags_in_window = aggregation.in_period(laags, "created_at", period)

            laag_counts = {status: 0 for status in LAAG_STATUSES}
            for laag in laags_in_window:
                if laag.get("status") in laag_counts:
                    laag_counts[laag["status"]] += 1

            per_group = {
                g["id"]: GroupLaagStats(group_id=g["id"], group_name=g.get("group_name") or "")
                for g in groups
            }
            field_for = {PLANNING: "planning_count", COMPLETED: "completed_count", CANCELLED: "cancelled_count"}
            for laag in laags_in_window:
                stats = per_group.get(laag.get("group_id"))
                field = field_for.get(laag.get("status"))
                if stats is not None and field is not None:
                    setattr(stats, field, getattr(stats, field) + 1)

            stats = sorted(
                per_group.values(),
                key=lambda s: (-(s.planning_count + s.completed_count + s.cancelled_count), s.group_name.lower())
            )
            return DashboardResponse(
                period=period,
                user_count=len([u for u in users if u.get("role") != "admin"]),
                group_count=len(groups_in_window),
                laag_counts=laag_counts,
                groups=stats
            )
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Error loading dashboard: {e}")
            raise HTTPException(status_code=500, detail="Failed to load dashboard")
