import pytest

from app.modules.laags import lifecycle
from app.modules.laags.attendees import attendee_set, diff_attendees, unique_attendees


def rows(*pairs):
    return [{"id": row_id, "attendee_id": attendee_id, "is_removed": False} for row_id, attendee_id in pairs]


class TestLifecycle:
    @pytest.mark.parametrize("target", ["Completed", "Cancelled"])
    def test_planning_moves_forward(self, target):
        assert lifecycle.check_transition("Planning", target) is True

    @pytest.mark.parametrize("status", ["Planning", "Completed", "Cancelled"])
    def test_same_status_is_a_no_op(self, status):
        assert lifecycle.check_transition(status, status) is False

    @pytest.mark.parametrize("current,target", [
        ("Completed", "Planning"),
        ("Completed", "Cancelled"),
        ("Cancelled", "Planning"),
        ("Cancelled", "Completed"),
    ])
    def test_terminal_states_are_final(self, current, target):
        with pytest.raises(lifecycle.InvalidTransition):
            lifecycle.check_transition(current, target)

    def test_unknown_status(self):
        with pytest.raises(ValueError):
            lifecycle.check_transition("Planning", "Postponed")

    def test_allowed_targets(self):
        assert lifecycle.allowed_targets("Planning") == {"Completed", "Cancelled"}
        assert lifecycle.allowed_targets("Completed") == set()


class TestAttendees:
    def test_attendee_set_adds_organizer_once(self):
        assert attendee_set(["a", "b", "a"], "org") == ["a", "b", "org"]
        assert attendee_set(["org", "a"], "org") == ["org", "a"]

    def test_unique_attendees_skips_removed_and_duplicates(self):
        data = rows(("r1", "a"), ("r2", "a"), ("r3", "b"))
        data.append({"id": "r4", "attendee_id": "c", "is_removed": True})
        assert [r["id"] for r in unique_attendees(data)] == ["r1", "r3"]

    def test_diff(self):
        to_remove, to_add = diff_attendees(rows(("r1", "a"), ("r2", "b")), ["b", "c"])
        assert to_remove == ["r1"]
        assert to_add == ["c"]

    def test_same_target_produces_no_changes(self):
        current = rows(("r1", "a"), ("r2", "b"))
        assert diff_attendees(current, ["b", "a"]) == ([], [])

    def test_duplicate_active_rows_collapse_to_one(self):
        to_remove, to_add = diff_attendees(rows(("r1", "a"), ("r2", "a")), ["a"])
        assert to_remove == ["r2"]
        assert to_add == []

    def test_empty_current(self):
        assert diff_attendees([], ["a", "a", "b"]) == ([], ["a", "b"])

    def test_result_equals_target(self):
        current = rows(("r1", "a"), ("r2", "b"), ("r3", "c"))
        target = ["c", "d"]
        to_remove, to_add = diff_attendees(current, target)
        remaining = {r["attendee_id"] for r in current if r["id"] not in to_remove}
        assert remaining | set(to_add) == set(target)
