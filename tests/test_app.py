from app.config import settings
from app.database.supabase_client import SupabaseClient, check_connection
from conftest import FakeSupabase


def test_root_and_health(client):
    assert client.get("/").json() == {"message": "Welcome to laag-backend", "status": "healthy"}
    response = client.get("/health")
    assert response.json() == {"status": "healthy"}
    assert response.headers["X-Content-Type-Options"] == "nosniff"


def test_ready_without_configuration(client, monkeypatch):
    monkeypatch.setattr(settings, "supabase_url", "")
    SupabaseClient.reset_client()
    response = client.get("/ready")
    assert response.status_code == 503


def test_check_connection():
    db = FakeSupabase()
    assert check_connection(db) is True
    db.fail_on("profiles", "select")
    assert check_connection(db) is False
