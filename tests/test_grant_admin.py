from app.scripts.grant_admin import main, set_role
from conftest import FakeSupabase


def test_promotes_and_demotes():
    db = FakeSupabase()
    user_id = db.add_user("Juan Dela Cruz", email="juan@example.com")

    assert set_role(db, ["juan@example.com"], "admin") == 1
    assert db.get("profiles", user_id)["role"] == "admin"

    assert set_role(db, ["juan@example.com"], "admin") == 0

    assert main(["--revoke", "juan@example.com"], supabase=db) == 0
    assert db.get("profiles", user_id)["role"] == "user"


def test_skips_missing_and_deactivated_profiles():
    db = FakeSupabase()
    gone = db.add_user("Gina Gone", email="gina@example.com")
    db.get("profiles", gone)["is_deleted"] = True

    assert set_role(db, ["nobody@example.com", "gina@example.com"], "admin") == 0
    assert db.get("profiles", gone)["role"] == "user"


def test_failed_update_is_logged_and_skipped():
    db = FakeSupabase()
    db.add_user("Juan Dela Cruz", email="juan@example.com")
    db.fail_on("profiles", "update")

    assert set_role(db, ["juan@example.com"], "admin") == 0
