from datetime import datetime

import pytest

from app.modules.analytics import aggregation
from conftest import auth_headers, laag_payload

NOW = datetime(2025, 6, 18, 15, 30)  # a Wednesday


class TestAggregation:
    @pytest.mark.parametrize("period,expected", [
        ("today", datetime(2025, 6, 18)),
        ("week", datetime(2025, 6, 16)),
        ("month", datetime(2025, 6, 1)),
        ("year", datetime(2025, 1, 1)),
        ("all-time", None),
    ])
    def test_period_start(self, period, expected):
        assert aggregation.period_start(period, NOW) == expected

    def test_unknown_period(self):
        with pytest.raises(ValueError):
            aggregation.period_start("decade", NOW)

    def test_bucket_series_counts_and_sums(self):
        rows = [
            {"when_start": "2025-06-02T10:00:00+00:00", "actual_cost": 100},
            {"when_start": "2025-05-20T10:00:00+00:00", "actual_cost": None},
            {"when_start": "2025-06-10T10:00:00+00:00", "actual_cost": 50.5},
        ]
        assert aggregation.bucket_series(rows, "when_start", "year") == [
            {"time": "2025-05", "value": 1},
            {"time": "2025-06", "value": 2},
        ]
        assert aggregation.bucket_series(rows, "when_start", "year", value_field="actual_cost") == [
            {"time": "2025-05", "value": 0},
            {"time": "2025-06", "value": 150.5},
        ]

    def test_in_period(self):
        rows = [{"created_at": "2025-06-17T09:00:00+00:00"}, {"created_at": "2025-06-01T09:00:00+00:00"}]
        assert len(aggregation.in_period(rows, "created_at", "week", NOW)) == 1
        assert len(aggregation.in_period(rows, "created_at", "all-time", NOW)) == 2

    def test_distribution(self):
        rows = [{"type": "Food Trip"}, {"type": "Reunion"}, {"type": "Food Trip"}, {"type": None}]
        assert aggregation.distribution(rows, "type") == [
            {"name": "Food Trip", "value": 2},
            {"name": "Reunion", "value": 1},
        ]

    def test_leaderboard_counts_each_laag_once_and_breaks_ties_by_name(self):
        rows = [
            {"laag_id": "l1", "attendee_id": "zed", "is_removed": False},
            {"laag_id": "l1", "attendee_id": "zed", "is_removed": False},
            {"laag_id": "l1", "attendee_id": "amy", "is_removed": False},
            {"laag_id": "l2", "attendee_id": "bob", "is_removed": False},
            {"laag_id": "l2", "attendee_id": "bob", "is_removed": True},
            {"laag_id": "l3", "attendee_id": "bob", "is_removed": False},
        ]
        cards = {
            "zed": {"full_name": "Zed"},
            "amy": {"full_name": "Amy"},
            "bob": {"full_name": "Bob"},
        }
        board = aggregation.build_leaderboard(rows, cards)
        assert [(e["full_name"], e["laag_count"]) for e in board] == [("Bob", 2), ("Amy", 1), ("Zed", 1)]


class TestAnalyticsRoutes:
    def test_leaderboard(self, client, fake_db, laag, group, owner, member, outsider):
        client.post(
            f"/api/v1/groups/{group['id']}/laags",
            json=laag_payload([member], what="Food crawl", type="Food Trip"),
            headers=auth_headers(member)
        )
        response = client.get("/api/v1/analytics/leaderboard", headers=auth_headers(outsider))
        assert response.status_code == 200
        body = response.json()
        assert body["total"] == 2
        assert [(e["full_name"], e["laag_count"], e["rank"]) for e in body["entries"]] == [
            ("Mark Member", 2, 1),
            ("Olivia Owner", 1, 2),
        ]

        response = client.get(
            "/api/v1/analytics/leaderboard",
            params={"search": "olivia", "limit": 1},
            headers=auth_headers(outsider)
        )
        body = response.json()
        assert [e["rank"] for e in body["entries"]] == [2]
        assert body["has_more"] is False

    def test_leaderboard_ignores_deleted_laags(self, client, laag, owner, outsider):
        client.delete(f"/api/v1/laags/{laag['id']}", headers=auth_headers(owner))
        response = client.get("/api/v1/analytics/leaderboard", headers=auth_headers(outsider))
        assert response.json()["entries"] == []

    def test_group_analytics(self, client, group, laag, owner, member):
        client.post(
            f"/api/v1/laags/{laag['id']}/complete",
            json={"actual_cost": 1200, "fun_meter": 9},
            headers=auth_headers(owner)
        )
        response = client.get(f"/api/v1/groups/{group['id']}/analytics", headers=auth_headers(member))
        assert response.status_code == 200
        body = response.json()
        assert body["period"] == "all-time"
        assert body["activity"] == [{"time": "2025-06", "value": 1}]
        assert body["spending"] == [{"time": "2025-06", "value": 1200}]
        assert body["types"] == [{"name": "Beach Outing", "value": 1}]
        assert body["statuses"] == [{"name": "Completed", "value": 1}]

    def test_group_analytics_rejects_unknown_period(self, client, group, member):
        response = client.get(
            f"/api/v1/groups/{group['id']}/analytics",
            params={"period": "decade"},
            headers=auth_headers(member)
        )
        assert response.status_code == 400

    def test_group_analytics_needs_membership(self, client, group, outsider):
        response = client.get(f"/api/v1/groups/{group['id']}/analytics", headers=auth_headers(outsider))
        assert response.status_code == 403

    def test_dashboard_is_admin_only(self, client, laag, group, admin, owner):
        assert client.get("/api/v1/analytics/dashboard", headers=auth_headers(owner)).status_code == 403

        response = client.get("/api/v1/analytics/dashboard", headers=auth_headers(admin))
        assert response.status_code == 200
        body = response.json()
        assert body["user_count"] == 2
        assert body["group_count"] == 1
        assert body["laag_counts"] == {"Planning": 1, "Completed": 0, "Cancelled": 0}
        assert body["groups"][0]["group_name"] == "Barkada"
        assert body["groups"][0]["planning_count"] == 1
