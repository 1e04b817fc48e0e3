"""Shared fixtures: an in-memory stand-in for the data service, a fake auth
gateway, token minting and a CSRF-aware request helper."""

import copy
import itertools
import uuid
from datetime import datetime, timedelta, timezone
from typing import Any, Iterable

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from jose import jwt

from gello.config import get_settings
from gello.db.session import get_auth_client, get_db, get_service_db
from gello.db.supabase import AuthSession, jsonable
from gello.exceptions import DataServiceError, DuplicateUserError, InvalidCredentialsError
from gello.main import create_app

_EPOCH = datetime(2025, 1, 1, tzinfo=timezone.utc)

TABLE_DEFAULTS: dict[str, dict[str, Any]] = {
    "users": {"role": "member", "team_id": None, "total_points": 0, "avatar_url": None},
    "teams": {},
    "boards": {"description": None, "created_by": None},
    "lists": {"position": 0},
    "tasks": {
        "description": None,
        "story_points": 1,
        "assigned_to": None,
        "position": 0,
        "due_date": None,
        "completed_at": None,
    },
    "points_history": {"task_id": None, "awarded_by": None, "notes": None},
    "shop_items": {"description": None, "category": "item", "image_url": None, "is_active": True},
    "redemptions": {},
}

TIMESTAMP_COLUMN = {"redemptions": "redeemed_at"}


def _matches(row: dict[str, Any], match: dict[str, Any]) -> bool:
    for column, value in match.items():
        value = jsonable(value)
        if row.get(column) != value:
            return False
    return True


def _sort_key(value: Any) -> tuple[bool, Any]:
    return (value is None, value if value is not None else 0)


class InMemoryDatabase:
    """Implements the ``Database`` interface over dicts, including the stored procedures."""

    def __init__(self) -> None:
        self.tables: dict[str, list[dict[str, Any]]] = {name: [] for name in TABLE_DEFAULTS}
        self.rpc_calls: list[tuple[str, dict[str, Any]]] = []
        self.fail_with: Exception | None = None
        self._clock = itertools.count(1)

    def _now(self) -> str:
        return (_EPOCH + timedelta(seconds=next(self._clock))).isoformat()

    # -- seeding -----------------------------------------------------------

    def add(self, table: str, **values: Any) -> dict[str, Any]:
        row = {
            "id": str(uuid.uuid4()),
            **TABLE_DEFAULTS[table],
            TIMESTAMP_COLUMN.get(table, "created_at"): self._now(),
            **jsonable(values),
        }
        self.tables[table].append(row)
        return copy.deepcopy(row)

    def rows(self, table: str, **match: Any) -> list[dict[str, Any]]:
        return [copy.deepcopy(row) for row in self.tables[table] if _matches(row, match)]

    def row(self, table: str, row_id: Any) -> dict[str, Any] | None:
        found = self.rows(table, id=row_id)
        return found[0] if found else None

    # -- Database interface ----------------------------------------------------

    def _check(self) -> None:
        if self.fail_with is not None:
            raise self.fail_with

    async def select(
        self,
        table: str,
        *,
        columns: str = "*",
        match: dict[str, Any] | None = None,
        in_: dict[str, Iterable[Any]] | None = None,
        order_by: list[tuple[str, bool]] | None = None,
        limit: int | None = None,
    ) -> list[dict[str, Any]]:
        self._check()
        rows = [row for row in self.tables[table] if _matches(row, match or {})]
        for column, values in (in_ or {}).items():
            allowed = {jsonable(v) for v in values}
            rows = [row for row in rows if row.get(column) in allowed]
        for column, desc in reversed(order_by or []):
            rows = sorted(rows, key=lambda row: _sort_key(row.get(column)), reverse=desc)
        if limit is not None:
            rows = rows[:limit]
        wanted = [c.strip() for c in columns.split(",")]
        if "*" not in wanted:
            rows = [{c: row.get(c) for c in wanted} for row in rows]
        return copy.deepcopy(rows)

    async def select_one(self, table: str, *, columns: str = "*", **match: Any) -> dict[str, Any] | None:
        rows = await self.select(table, columns=columns, match=match, limit=1)
        return rows[0] if rows else None

    async def insert(self, table: str, values: dict[str, Any]) -> dict[str, Any]:
        self._check()
        return self.add(table, **values)

    async def update(self, table: str, values: dict[str, Any], *, match: dict[str, Any]) -> list[dict[str, Any]]:
        self._check()
        updated = []
        for row in self.tables[table]:
            if _matches(row, match):
                row.update(jsonable(values))
                updated.append(copy.deepcopy(row))
        return updated

    async def delete(self, table: str, *, match: dict[str, Any]) -> list[dict[str, Any]]:
        self._check()
        kept, deleted = [], []
        for row in self.tables[table]:
            (deleted if _matches(row, match) else kept).append(row)
        self.tables[table] = kept
        return copy.deepcopy(deleted)

    async def rpc(self, function: str, params: dict[str, Any]) -> Any:
        self._check()
        params = jsonable(params)
        self.rpc_calls.append((function, params))
        return getattr(self, f"_rpc_{function}")(**params)

    async def ping(self) -> None:
        self._check()

    async def aclose(self) -> None:
        pass

    # -- stored procedures -----------------------------------------------------

    def _user_row(self, user_id: str) -> dict[str, Any] | None:
        return next((row for row in self.tables["users"] if row["id"] == user_id), None)

    def _rpc_complete_task_with_points(self, p_task_id: str, p_awarded_by: str) -> dict[str, Any]:
        task = next((row for row in self.tables["tasks"] if row["id"] == p_task_id), None)
        if task is None:
            raise DataServiceError("task_not_found", service_code="P0002")
        assignee = task["assigned_to"]
        if task["completed_at"] is not None or assignee is None or assignee != p_awarded_by:
            user = self._user_row(assignee) if assignee else None
            return {
                "task": copy.deepcopy(task),
                "points_awarded": 0,
                "total_points": user["total_points"] if user else None,
            }
        task["completed_at"] = self._now()
        self.add(
            "points_history",
            user_id=assignee,
            points_earned=task["story_points"],
            reason="task_complete",
            task_id=task["id"],
            awarded_by=p_awarded_by,
        )
        user = self._user_row(assignee)
        user["total_points"] += task["story_points"]
        return {
            "task": copy.deepcopy(task),
            "points_awarded": task["story_points"],
            "total_points": user["total_points"],
        }

    def _rpc_create_points_history_atomic(
        self,
        p_user_id: str,
        p_points_earned: int,
        p_reason: str,
        p_task_id: str | None = None,
        p_awarded_by: str | None = None,
        p_notes: str | None = None,
    ) -> dict[str, Any]:
        user = self._user_row(p_user_id)
        if user is None:
            raise DataServiceError("user_not_found", service_code="P0002")
        if user["total_points"] + p_points_earned < 0:
            raise DataServiceError("insufficient_points", service_code="P0001")
        user["total_points"] += p_points_earned
        return self.add(
            "points_history",
            user_id=p_user_id,
            points_earned=p_points_earned,
            reason=p_reason,
            task_id=p_task_id,
            awarded_by=p_awarded_by,
            notes=p_notes,
        )

    def _rpc_redeem_shop_item(self, p_item_id: str, p_user_id: str) -> dict[str, Any]:
        item = next((row for row in self.tables["shop_items"] if row["id"] == p_item_id), None)
        if item is None:
            raise DataServiceError("item_not_found", service_code="P0002")
        if not item["is_active"]:
            raise DataServiceError("item_inactive", service_code="P0001")
        user = self._user_row(p_user_id)
        if user is None:
            raise DataServiceError("user_not_found", service_code="P0002")
        if user["total_points"] < item["point_cost"]:
            raise DataServiceError("insufficient_points", service_code="P0001")
        user["total_points"] -= item["point_cost"]
        self.add(
            "points_history",
            user_id=p_user_id,
            points_earned=-item["point_cost"],
            reason="redemption",
            notes=f"Redeemed: {item['name']}",
        )
        return self.add(
            "redemptions",
            user_id=p_user_id,
            shop_item_id=item["id"],
            points_spent=item["point_cost"],
        )

    def _rpc_reorder_lists(
        self,
        p_board_id: str,
        p_list_positions: list[dict[str, Any]],
        p_user_id: str | None = None,
    ) -> int:
        positions = {item["id"]: item["position"] for item in p_list_positions}
        count = 0
        for row in self.tables["lists"]:
            if row["board_id"] == p_board_id and row["id"] in positions:
                row["position"] = positions[row["id"]]
                count += 1
        return count


def make_token(user_id: Any, expires_in: int = 3600, **claims: Any) -> str:
    """Mint an access token the way the auth service signs them."""
    settings = get_settings()
    payload = {
        "sub": str(user_id),
        "aud": settings.supabase_jwt_audience,
        "role": "authenticated",
        "exp": datetime.now(timezone.utc) + timedelta(seconds=expires_in),
        **claims,
    }
    return jwt.encode(payload, settings.supabase_jwt_secret.get_secret_value(), algorithm="HS256")


class FakeAuth:
    """Stand-in for ``SupabaseAuth`` that issues real, verifiable tokens."""

    def __init__(self) -> None:
        self.accounts: dict[str, tuple[str, str]] = {}
        self.refresh_tokens: dict[str, str] = {}
        self.signed_out: list[str] = []
        self.deleted: list[str] = []

    def _session(self, user_id: str) -> AuthSession:
        refresh_token = uuid.uuid4().hex
        self.refresh_tokens[refresh_token] = user_id
        return AuthSession(user_id=user_id, access_token=make_token(user_id), refresh_token=refresh_token)

    def add_account(self, email: str, password: str, user_id: str) -> None:
        self.accounts[email] = (password, user_id)

    async def sign_up(self, email: str, password: str, metadata: dict[str, Any]) -> tuple[str, AuthSession | None]:
        if email in self.accounts:
            raise DuplicateUserError()
        user_id = str(uuid.uuid4())
        self.accounts[email] = (password, user_id)
        return user_id, self._session(user_id)

    async def sign_in(self, email: str, password: str) -> AuthSession:
        account = self.accounts.get(email)
        if account is None or account[0] != password:
            raise InvalidCredentialsError()
        return self._session(account[1])

    async def refresh(self, refresh_token: str) -> AuthSession | None:
        user_id = self.refresh_tokens.pop(refresh_token, None)
        return self._session(user_id) if user_id else None

    async def sign_out(self, access_token: str) -> None:
        self.signed_out.append(access_token)

    async def delete_user(self, user_id: str) -> None:
        self.deleted.append(user_id)
        self.accounts = {email: acct for email, acct in self.accounts.items() if acct[1] != user_id}


@pytest.fixture
def db() -> InMemoryDatabase:
    return InMemoryDatabase()


@pytest.fixture
def fake_auth() -> FakeAuth:
    return FakeAuth()


@pytest.fixture
def app(db: InMemoryDatabase, fake_auth: FakeAuth) -> FastAPI:
    application = create_app()

    async def override_db():
        yield db

    application.dependency_overrides[get_db] = override_db
    application.dependency_overrides[get_service_db] = override_db
    application.dependency_overrides[get_auth_client] = lambda: fake_auth
    return application


@pytest.fixture
def client(app: FastAPI) -> TestClient:
    return TestClient(app)


def csrf_headers(client: TestClient) -> dict[str, str]:
    """Fetch a CSRF token; the secret cookie stays in the client's jar."""
    response = client.get("/api/csrf-token")
    assert response.status_code == 200
    return {get_settings().csrf_header_name: response.json()["csrf_token"]}


def auth_headers(client: TestClient, user: dict[str, Any]) -> dict[str, str]:
    """Bearer token for ``user`` plus a CSRF token."""
    return {"Authorization": f"Bearer {make_token(user['id'])}", **csrf_headers(client)}


@pytest.fixture
def admin(db: InMemoryDatabase) -> dict[str, Any]:
    return db.add("users", email="admin@example.com", display_name="Ada Admin", role="admin")


@pytest.fixture
def manager(db: InMemoryDatabase) -> dict[str, Any]:
    return db.add("users", email="manager@example.com", display_name="Max Manager", role="manager")


@pytest.fixture
def member(db: InMemoryDatabase) -> dict[str, Any]:
    return db.add("users", email="member@example.com", display_name="Mia Member", role="member")


@pytest.fixture
def board_setup(db: InMemoryDatabase, manager: dict[str, Any]) -> dict[str, Any]:
    """A team with one board and one list."""
    team = db.add("teams", name="Platform")
    board = db.add("boards", name="Sprint 1", team_id=team["id"], created_by=manager["id"])
    task_list = db.add("lists", board_id=board["id"], name="To Do", position=0)
    return {"team": team, "board": board, "list": task_list}
