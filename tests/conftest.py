"""
Shared fixtures: an in-memory stand-in for the Supabase client (tables, auth,
storage) injected into the app through dependency_overrides.
"""

import uuid
from datetime import datetime, timedelta, timezone
from types import SimpleNamespace
from typing import Any, Dict, List, Optional

import pytest
from fastapi.testclient import TestClient

from app.core.soft_delete import SOFT_DELETE_FLAGS
from app.database.supabase_client import get_supabase
from app.main import app
from app.modules.auth.service import clear_auth_cache

TABLE_DEFAULTS = {
    "profiles": {
        "role": "user", "is_deleted": False, "is_darkmode": False,
        "is_allow_notifications": True, "avatar_url": None, "full_name": None,
    },
    "groups": {"group_picture": None, "no_members": 0},
    "laagNotificationReads": {"is_read": False, "read_at": None},
}


class FakeResponse:
    def __init__(self, data):
        self.data = data


class FakeQuery:
    """Chainable subset of the postgrest query builder"""

    def __init__(self, db: "FakeSupabase", table: str):
        self.db = db
        self.table = table
        self.op = "select"
        self.payload: Any = None
        self.filters: List = []
        self.ordering: Optional[tuple] = None
        self.row_limit: Optional[int] = None
        self.row_offset = 0

    def select(self, columns: str = "*"):
        self.op = "select"
        return self

    def insert(self, payload):
        self.op, self.payload = "insert", payload
        return self

    def update(self, payload):
        self.op, self.payload = "update", payload
        return self

    def upsert(self, payload):
        self.op, self.payload = "upsert", payload
        return self

    def delete(self):
        self.op = "delete"
        return self

    def eq(self, column, value):
        self.filters.append(lambda row: row.get(column) == value)
        return self

    def neq(self, column, value):
        self.filters.append(lambda row: row.get(column) != value)
        return self

    def in_(self, column, values):
        values = list(values)
        self.filters.append(lambda row: row.get(column) in values)
        return self

    def order(self, column, desc=False):
        self.ordering = (column, desc)
        return self

    def limit(self, n):
        self.row_limit = n
        return self

    def offset(self, n):
        self.row_offset = n
        return self

    def _matching(self) -> List[Dict[str, Any]]:
        return [r for r in self.db.tables.setdefault(self.table, []) if all(f(r) for f in self.filters)]

    def execute(self):
        self.db.check_failure(self.table, self.op)
        if self.op == "select":
            rows = self._matching()
            if self.ordering:
                column, desc = self.ordering
                present = [r for r in rows if r.get(column) is not None]
                missing = [r for r in rows if r.get(column) is None]
                present.sort(key=lambda r: r[column], reverse=desc)
                rows = present + missing
            rows = rows[self.row_offset:]
            if self.row_limit is not None:
                rows = rows[:self.row_limit]
            return FakeResponse([dict(r) for r in rows])
        if self.op == "insert":
            items = self.payload if isinstance(self.payload, list) else [self.payload]
            created = [self.db.add(self.table, item) for item in items]
            self.db.writes.append((self.table, "insert", len(created)))
            return FakeResponse([dict(r) for r in created])
        if self.op == "update":
            rows = self._matching()
            for row in rows:
                row.update(self.payload)
            self.db.writes.append((self.table, "update", len(rows)))
            return FakeResponse([dict(r) for r in rows])
        if self.op == "upsert":
            existing = self.db.get(self.table, self.payload.get("id"))
            if existing is not None:
                existing.update(self.payload)
                row = existing
            else:
                row = self.db.add(self.table, self.payload)
            self.db.writes.append((self.table, "upsert", 1))
            return FakeResponse([dict(row)])
        if self.op == "delete":
            rows = self._matching()
            self.db.tables[self.table] = [r for r in self.db.tables[self.table] if r not in rows]
            return FakeResponse([dict(r) for r in rows])
        raise ValueError(self.op)


class FakeAuth:
    def __init__(self, db: "FakeSupabase"):
        self.db = db
        self.passwords: Dict[str, tuple] = {}

    def _user(self, user_id: str):
        profile = self.db.get("profiles", user_id) or {}
        return SimpleNamespace(id=user_id, email=profile.get("email"), user_metadata={})

    def sign_up(self, credentials):
        email = credentials["email"]
        if email in self.passwords:
            raise Exception("User already registered")
        user_id = str(uuid.uuid4())
        self.passwords[email] = (credentials["password"], user_id)
        return SimpleNamespace(user=SimpleNamespace(id=user_id, email=email, user_metadata={}))

    def sign_in_with_password(self, credentials):
        stored = self.passwords.get(credentials["email"])
        if stored is None or stored[0] != credentials["password"]:
            raise Exception("Invalid login credentials")
        user_id = stored[1]
        return SimpleNamespace(
            user=SimpleNamespace(id=user_id, email=credentials["email"], user_metadata={}),
            session=SimpleNamespace(access_token=f"token-{user_id}")
        )

    def get_user(self, jwt: str):
        if not jwt.startswith("token-"):
            raise Exception("invalid JWT")
        return SimpleNamespace(user=self._user(jwt[len("token-"):]))

    def sign_out(self):
        return None


class FakeBucket:
    def __init__(self, db: "FakeSupabase", bucket: str):
        self.db = db
        self.bucket = bucket

    def upload(self, path, content, file_options=None):
        self.db.objects[(self.bucket, path)] = content
        return {"Key": f"{self.bucket}/{path}"}

    def create_signed_url(self, path, expires_in):
        return {"signedURL": f"https://storage.test/{self.bucket}/{path}?expires={expires_in}"}


class FakeStorage:
    def __init__(self, db: "FakeSupabase"):
        self.db = db

    def from_(self, bucket: str):
        return FakeBucket(self.db, bucket)


class FakeSupabase:
    def __init__(self):
        self.tables: Dict[str, List[Dict[str, Any]]] = {}
        self.objects: Dict[tuple, bytes] = {}
        self.writes: List[tuple] = []
        self.failures: Dict[tuple, Exception] = {}
        self.clock = datetime(2025, 1, 1, tzinfo=timezone.utc)
        self.auth = FakeAuth(self)
        self.storage = FakeStorage(self)

    def table(self, name: str) -> FakeQuery:
        return FakeQuery(self, name)

    def tick(self) -> str:
        self.clock += timedelta(seconds=1)
        return self.clock.isoformat()

    def add(self, table: str, item: Dict[str, Any]) -> Dict[str, Any]:
        row = dict(TABLE_DEFAULTS.get(table, {}))
        if table in SOFT_DELETE_FLAGS:
            row[SOFT_DELETE_FLAGS[table]] = False
        row.update(item)
        row.setdefault("id", str(uuid.uuid4()))
        row.setdefault("created_at", self.tick())
        self.tables.setdefault(table, []).append(row)
        return row

    def get(self, table: str, row_id: Optional[str]) -> Optional[Dict[str, Any]]:
        for row in self.tables.get(table, []):
            if row["id"] == row_id:
                return row
        return None

    def rows(self, table: str, **filters) -> List[Dict[str, Any]]:
        return [r for r in self.tables.get(table, []) if all(r.get(k) == v for k, v in filters.items())]

    def fail_on(self, table: str, op: str, error: Optional[Exception] = None):
        self.failures[(table, op)] = error or Exception(f"{op} on {table} failed")

    def check_failure(self, table: str, op: str):
        error = self.failures.get((table, op))
        if error is not None:
            raise error

    def add_user(self, full_name: str, role: str = "user", email: Optional[str] = None) -> str:
        user_id = str(uuid.uuid4())
        email = email or f"{full_name.lower().replace(' ', '.')}@example.com"
        self.add("profiles", {"id": user_id, "email": email, "full_name": full_name, "role": role})
        return user_id


def auth_headers(user_id: str) -> Dict[str, str]:
    return {"Authorization": f"Bearer token-{user_id}"}


@pytest.fixture
def fake_db():
    return FakeSupabase()


@pytest.fixture
def client(fake_db):
    clear_auth_cache()
    app.dependency_overrides[get_supabase] = lambda: fake_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
    clear_auth_cache()


@pytest.fixture
def owner(fake_db):
    return fake_db.add_user("Olivia Owner")


@pytest.fixture
def member(fake_db):
    return fake_db.add_user("Mark Member")


@pytest.fixture
def outsider(fake_db):
    return fake_db.add_user("Oscar Outsider")


@pytest.fixture
def admin(fake_db):
    return fake_db.add_user("Ada Admin", role="admin")


@pytest.fixture
def group(client, owner, member):
    """Group owned by `owner` with `member` as its only other member"""
    response = client.post(
        "/api/v1/groups",
        data={"group_name": "Barkada", "members": [member]},
        headers=auth_headers(owner)
    )
    assert response.status_code == 201, response.text
    return response.json()


def laag_payload(attendees: List[str], /, **overrides) -> Dict[str, Any]:
    payload = {
        "what": "Beach day",
        "where": "La Union",
        "why": "Summer",
        "type": "Beach Outing",
        "estimated_cost": 1500,
        "status": "Planning",
        "when_start": "2025-06-01T08:00:00+00:00",
        "when_end": "2025-06-01T18:00:00+00:00",
        "privacy": "group-only",
        "attendees": attendees,
    }
    payload.update(overrides)
    return payload


@pytest.fixture
def laag(client, group, owner, member):
    """Planning laag organized by `owner` with `member` attending"""
    response = client.post(
        f"/api/v1/groups/{group['id']}/laags",
        json=laag_payload([member]),
        headers=auth_headers(owner)
    )
    assert response.status_code == 201, response.text
    return response.json()
