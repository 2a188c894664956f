import pytest

from conftest import auth_headers, laag_payload


def attendee_ids(laag):
    return sorted(a["attendee_id"] for a in laag["attendees"])


def create(client, group_id, user_id, payload):
    response = client.post(f"/api/v1/groups/{group_id}/laags", json=payload, headers=auth_headers(user_id))
    assert response.status_code == 201, response.text
    return response.json()


def attendee_writes(fake_db):
    return [w for w in fake_db.writes if w[0] == "laagAttendees"]


class TestCreateLaag:
    def test_organizer_is_added_as_attendee(self, laag, owner, member):
        assert laag["organizer"] == owner
        assert laag["status"] == "Planning"
        assert laag["group_name"] == "Barkada"
        assert laag["organizer_profile"]["full_name"] == "Olivia Owner"
        assert attendee_ids(laag) == sorted([owner, member])

    def test_notification_on_create(self, fake_db, laag, owner, member):
        notifications = fake_db.rows("laagNotifications", laag_id=laag["id"])
        assert len(notifications) == 1
        assert notifications[0]["laag_status"] == "Planning"

        reads = {r["user_id"]: r for r in fake_db.rows("laagNotificationReads", notification_id=notifications[0]["id"])}
        assert set(reads) == {owner, member}
        assert reads[owner]["is_read"] is True
        assert reads[owner]["read_at"] is not None
        assert reads[member]["is_read"] is False

    def test_duplicate_attendees_are_collapsed(self, client, fake_db, group, owner, member):
        created = create(client, group["id"], owner, laag_payload([member, member, owner]))
        assert len(fake_db.rows("laagAttendees", laag_id=created["id"])) == 2

    def test_member_can_organize(self, client, group, member):
        created = create(client, group["id"], member, laag_payload([member]))
        assert created["organizer"] == member
        assert attendee_ids(created) == [member]

    def test_completed_laag_can_be_logged(self, client, group, owner, member):
        created = create(client, group["id"], owner, laag_payload(
            [member], status="Completed", actual_cost=1800, fun_meter=9
        ))
        assert created["status"] == "Completed"
        assert created["actual_cost"] == 1800

    def test_attendees_must_belong_to_the_group(self, client, group, owner, outsider):
        response = client.post(
            f"/api/v1/groups/{group['id']}/laags",
            json=laag_payload([outsider]),
            headers=auth_headers(owner)
        )
        assert response.status_code == 400

    def test_outsider_cannot_create(self, client, group, outsider):
        response = client.post(
            f"/api/v1/groups/{group['id']}/laags",
            json=laag_payload([outsider]),
            headers=auth_headers(outsider)
        )
        assert response.status_code == 403

    @pytest.mark.parametrize("overrides", [
        {"when_end": "2025-05-31T08:00:00+00:00"},
        {"type": "Space Travel"},
        {"status": "Cancelled"},
        {"what": "x" * 26},
        {"estimated_cost": -1},
        {"fun_meter": 11},
        {"attendees": []},
    ])
    def test_invalid_payloads(self, client, group, owner, member, overrides):
        payload = laag_payload([member], **overrides)
        response = client.post(f"/api/v1/groups/{group['id']}/laags", json=payload, headers=auth_headers(owner))
        assert response.status_code == 422


class TestReadLaags:
    @pytest.fixture
    def feed(self, client, group, owner, member, laag):
        food = create(client, group["id"], member, laag_payload(
            [member], what="Food crawl", where="Binondo", why=None, type="Food Trip",
            estimated_cost=500, privacy="public",
            when_start="2025-07-01T10:00:00+00:00", when_end="2025-07-01T14:00:00+00:00"
        ))
        hike = create(client, group["id"], owner, laag_payload(
            [member], what="Hike", where="Batulao", why=None, type="Hiking Adventure",
            estimated_cost=800, status="Completed", actual_cost=900, fun_meter=7,
            when_start="2025-03-01T05:00:00+00:00", when_end="2025-03-01T12:00:00+00:00"
        ))
        return {"beach": laag, "food": food, "hike": hike}

    def group_feed(self, client, group, user_id, **params):
        response = client.get(f"/api/v1/groups/{group['id']}/laags", params=params, headers=auth_headers(user_id))
        assert response.status_code == 200, response.text
        return [laag["what"] for laag in response.json()]

    def test_newest_first_by_default(self, client, group, member, feed):
        assert self.group_feed(client, group, member) == ["Hike", "Food crawl", "Beach day"]

    def test_search(self, client, group, member, feed):
        assert self.group_feed(client, group, member, q="food") == ["Food crawl"]
        assert self.group_feed(client, group, member, q="union") == ["Beach day"]

    def test_filters(self, client, group, member, feed):
        assert self.group_feed(client, group, member, status="Completed") == ["Hike"]
        assert self.group_feed(client, group, member, privacy="public") == ["Food crawl"]
        assert self.group_feed(
            client, group, member,
            start_from="2025-05-01T00:00:00", start_to="2025-12-31T00:00:00"
        ) == ["Food crawl", "Beach day"]

    def test_date_filter_with_offset(self, client, group, member, feed):
        assert self.group_feed(
            client, group, member,
            start_from="2025-06-01T16:00:00+08:00", start_to="2025-06-01T16:00:00+08:00"
        ) == ["Beach day"]

    def test_sort_and_pagination(self, client, group, member, feed):
        assert self.group_feed(client, group, member, sort_by="estimated_cost", order="asc") == [
            "Food crawl", "Hike", "Beach day"
        ]
        assert self.group_feed(client, group, member, sort_by="when_start", order="asc", limit=1, offset=1) == [
            "Beach day"
        ]
        assert self.group_feed(client, group, member, sort_by="actual_cost") == ["Hike", "Beach day", "Food crawl"]

    def test_unknown_sort_field(self, client, group, member, feed):
        response = client.get(
            f"/api/v1/groups/{group['id']}/laags",
            params={"sort_by": "what"},
            headers=auth_headers(member)
        )
        assert response.status_code == 400

    def test_outsider_cannot_list_group(self, client, group, outsider, feed):
        response = client.get(f"/api/v1/groups/{group['id']}/laags", headers=auth_headers(outsider))
        assert response.status_code == 403

    def test_privacy_on_detail(self, client, outsider, admin, feed):
        assert client.get(f"/api/v1/laags/{feed['beach']['id']}", headers=auth_headers(outsider)).status_code == 403
        assert client.get(f"/api/v1/laags/{feed['food']['id']}", headers=auth_headers(outsider)).status_code == 200
        assert client.get(f"/api/v1/laags/{feed['beach']['id']}", headers=auth_headers(admin)).status_code == 200

    def test_public_feed(self, client, outsider, feed):
        response = client.get("/api/v1/laags/feed", headers=auth_headers(outsider))
        assert [laag["what"] for laag in response.json()] == ["Food crawl"]

    def test_upcoming(self, client, member, outsider, feed):
        response = client.get("/api/v1/laags/upcoming", headers=auth_headers(member))
        assert [laag["what"] for laag in response.json()] == ["Beach day", "Food crawl"]
        assert client.get("/api/v1/laags/upcoming", headers=auth_headers(outsider)).json() == []

    def test_admin_list(self, client, owner, admin, feed):
        assert client.get("/api/v1/laags/all", headers=auth_headers(owner)).status_code == 403

        response = client.get("/api/v1/laags/all", headers=auth_headers(admin))
        assert len(response.json()) == 3

        response = client.get("/api/v1/laags/all", params={"q": "mark"}, headers=auth_headers(admin))
        assert [laag["what"] for laag in response.json()] == ["Food crawl"]


class TestEditLaag:
    def test_organizer_edits_fields(self, client, laag, owner):
        response = client.put(
            f"/api/v1/laags/{laag['id']}",
            json={"what": "Surf day", "estimated_cost": 2000},
            headers=auth_headers(owner)
        )
        assert response.status_code == 200
        assert response.json()["what"] == "Surf day"
        assert response.json()["estimated_cost"] == 2000
        assert response.json()["where"] == "La Union"

    def test_only_organizer_edits(self, client, laag, member, admin):
        for user_id in (member, admin):
            response = client.put(f"/api/v1/laags/{laag['id']}", json={"what": "Mine"}, headers=auth_headers(user_id))
            assert response.status_code == 403

    def test_end_before_existing_start(self, client, laag, owner):
        response = client.put(
            f"/api/v1/laags/{laag['id']}",
            json={"when_end": "2025-05-01T00:00:00+00:00"},
            headers=auth_headers(owner)
        )
        assert response.status_code == 400

    def test_status_follows_lifecycle(self, client, fake_db, laag, owner):
        response = client.put(f"/api/v1/laags/{laag['id']}", json={"status": "Cancelled"}, headers=auth_headers(owner))
        assert response.status_code == 200
        assert response.json()["status"] == "Cancelled"
        assert len(fake_db.rows("laagNotifications", laag_id=laag["id"])) == 2

        response = client.put(f"/api/v1/laags/{laag['id']}", json={"status": "Planning"}, headers=auth_headers(owner))
        assert response.status_code == 409

        response = client.put(f"/api/v1/laags/{laag['id']}", json={"status": "Cancelled"}, headers=auth_headers(owner))
        assert response.status_code == 200
        assert len(fake_db.rows("laagNotifications", laag_id=laag["id"])) == 2

    def test_attendees_are_reconciled_to_the_submitted_set(self, client, fake_db, laag, owner, member):
        response = client.put(f"/api/v1/laags/{laag['id']}", json={"attendees": [member]}, headers=auth_headers(owner))
        assert response.status_code == 200
        assert attendee_ids(response.json()) == [member]

        active = fake_db.rows("laagAttendees", laag_id=laag["id"], is_removed=False)
        assert [r["attendee_id"] for r in active] == [member]

        response = client.put(
            f"/api/v1/laags/{laag['id']}",
            json={"attendees": [member, owner]},
            headers=auth_headers(owner)
        )
        assert attendee_ids(response.json()) == sorted([member, owner])

    def test_resubmitting_attendees_writes_nothing(self, client, fake_db, laag, owner, member):
        before = list(attendee_writes(fake_db))
        response = client.put(
            f"/api/v1/laags/{laag['id']}",
            json={"attendees": [owner, member]},
            headers=auth_headers(owner)
        )
        assert response.status_code == 200
        assert attendee_writes(fake_db) == before

    def test_attendees_must_be_members(self, client, laag, owner, outsider):
        response = client.put(
            f"/api/v1/laags/{laag['id']}",
            json={"attendees": [owner, outsider]},
            headers=auth_headers(owner)
        )
        assert response.status_code == 400

    def test_rejected_edit_leaves_laag_unchanged(self, client, fake_db, laag, owner, member, outsider):
        before = dict(fake_db.get("laags", laag["id"]))
        response = client.put(
            f"/api/v1/laags/{laag['id']}",
            json={"status": "Cancelled", "what": "Renamed", "attendees": [owner, outsider]},
            headers=auth_headers(owner)
        )
        assert response.status_code == 400
        assert fake_db.get("laags", laag["id"]) == before
        assert fake_db.rows("laagNotifications", laag_id=laag["id"], laag_status="Cancelled") == []
        active = fake_db.rows("laagAttendees", laag_id=laag["id"], is_removed=False)
        assert sorted(r["attendee_id"] for r in active) == sorted([owner, member])

    def test_null_for_required_fields_is_ignored(self, client, fake_db, laag, owner):
        response = client.put(
            f"/api/v1/laags/{laag['id']}",
            json={"what": None, "where": None, "type": None, "privacy": None, "estimated_cost": None},
            headers=auth_headers(owner)
        )
        assert response.status_code == 200
        stored = fake_db.get("laags", laag["id"])
        assert stored["what"] == "Beach day"
        assert stored["where"] == "La Union"
        assert stored["type"] == "Beach Outing"
        assert stored["privacy"] == "group-only"
        assert stored["estimated_cost"] == 1500

    def test_optional_fields_can_be_cleared(self, client, fake_db, laag, owner):
        response = client.put(f"/api/v1/laags/{laag['id']}", json={"why": None}, headers=auth_headers(owner))
        assert response.status_code == 200
        assert response.json()["why"] is None
        assert fake_db.get("laags", laag["id"])["why"] is None
        assert response.json()["what"] == "Beach day"


class TestCancelAndComplete:
    def test_cancel_notifies_every_attendee(self, client, fake_db, laag, owner, member):
        response = client.post(f"/api/v1/laags/{laag['id']}/cancel", headers=auth_headers(owner))
        assert response.status_code == 200
        assert response.json()["status"] == "Cancelled"

        notifications = fake_db.rows("laagNotifications", laag_id=laag["id"], laag_status="Cancelled")
        assert len(notifications) == 1
        reads = fake_db.rows("laagNotificationReads", notification_id=notifications[0]["id"])
        assert sorted(r["user_id"] for r in reads) == sorted([owner, member])
        assert all(r["is_read"] is False for r in reads)

    def test_cancel_twice(self, client, laag, owner):
        client.post(f"/api/v1/laags/{laag['id']}/cancel", headers=auth_headers(owner))
        assert client.post(f"/api/v1/laags/{laag['id']}/cancel", headers=auth_headers(owner)).status_code == 409

    def test_complete(self, client, fake_db, laag, owner):
        response = client.post(
            f"/api/v1/laags/{laag['id']}/complete",
            json={"actual_cost": 1200, "fun_meter": 8, "privacy": "public"},
            headers=auth_headers(owner)
        )
        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "Completed"
        assert body["actual_cost"] == 1200
        assert body["fun_meter"] == 8
        assert body["privacy"] == "public"
        assert len(fake_db.rows("laagNotifications", laag_id=laag["id"], laag_status="Completed")) == 1

    def test_complete_with_attendees(self, client, laag, owner):
        response = client.post(
            f"/api/v1/laags/{laag['id']}/complete",
            json={"actual_cost": 1200, "fun_meter": 8, "attendees": [owner]},
            headers=auth_headers(owner)
        )
        assert attendee_ids(response.json()) == [owner]

    def test_complete_with_outsider_keeps_laag_planning(self, client, fake_db, laag, owner, outsider):
        response = client.post(
            f"/api/v1/laags/{laag['id']}/complete",
            json={"actual_cost": 1200, "fun_meter": 8, "attendees": [owner, outsider]},
            headers=auth_headers(owner)
        )
        assert response.status_code == 400
        stored = fake_db.get("laags", laag["id"])
        assert stored["status"] == "Planning"
        assert stored.get("actual_cost") is None
        assert fake_db.rows("laagNotifications", laag_id=laag["id"], laag_status="Completed") == []

        response = client.post(
            f"/api/v1/laags/{laag['id']}/complete",
            json={"actual_cost": 1200, "fun_meter": 8, "attendees": [owner]},
            headers=auth_headers(owner)
        )
        assert response.status_code == 200
        assert len(fake_db.rows("laagNotifications", laag_id=laag["id"], laag_status="Completed")) == 1

    def test_complete_requires_final_numbers(self, client, laag, owner):
        response = client.post(
            f"/api/v1/laags/{laag['id']}/complete",
            json={"actual_cost": 1200},
            headers=auth_headers(owner)
        )
        assert response.status_code == 422

    def test_cancelled_laag_cannot_be_completed(self, client, laag, owner):
        client.post(f"/api/v1/laags/{laag['id']}/cancel", headers=auth_headers(owner))
        response = client.post(
            f"/api/v1/laags/{laag['id']}/complete",
            json={"actual_cost": 0, "fun_meter": 0},
            headers=auth_headers(owner)
        )
        assert response.status_code == 409

    def test_only_organizer(self, client, laag, member):
        assert client.post(f"/api/v1/laags/{laag['id']}/cancel", headers=auth_headers(member)).status_code == 403


class TestDeleteLaag:
    def test_organizer_deletes(self, client, fake_db, laag, owner, member):
        assert client.delete(f"/api/v1/laags/{laag['id']}", headers=auth_headers(member)).status_code == 403
        assert client.delete(f"/api/v1/laags/{laag['id']}", headers=auth_headers(owner)).status_code == 204

        assert fake_db.get("laags", laag["id"])["is_deleted"] is True
        assert client.get(f"/api/v1/laags/{laag['id']}", headers=auth_headers(owner)).status_code == 404
        assert client.get("/api/v1/laags/upcoming", headers=auth_headers(member)).json() == []

    def test_admin_deletes(self, client, laag, admin):
        assert client.delete(f"/api/v1/laags/{laag['id']}", headers=auth_headers(admin)).status_code == 204
