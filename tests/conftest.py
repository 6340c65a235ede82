"""
Shared fixtures: an in-memory stand-in for the Supabase client.

FakeDatabase keeps the four tables and enforces the same constraints as
supabase/migrations (unique handle/invite code, one profile per user, unique follow
pair, no self follow, content length). RPC procedures run under a lock so each call is
atomic. FakeSupabase mirrors the slice of the client API the services use.
"""

import secrets
import threading
import uuid
from datetime import datetime, timedelta, timezone
from types import SimpleNamespace
from typing import Dict, List, Optional

import pytest
from fastapi.testclient import TestClient
from postgrest.exceptions import APIError
from supabase_auth.errors import AuthError

from app.core.limiter import limiter
from app.database import supabase_client
from app.modules.auth.schemas import CurrentUser

SESSION_KEY = "supabase.auth.token"
BASE_TIME = datetime(2025, 1, 1, tzinfo=timezone.utc)


def api_error(code: str, message: str) -> APIError:
    return APIError({"code": code, "message": message, "details": None, "hint": None})


class FakeDatabase:
    def __init__(self):
        self.tables: Dict[str, List[dict]] = {
            "teams": [], "profiles": [], "posts": [], "follows": []
        }
        self.calls: List[tuple] = []
        self.lock = threading.Lock()
        self._clock = 0
        self.fail_next: Optional[APIError] = None

    def now(self) -> str:
        self._clock += 1
        return (BASE_TIME + timedelta(seconds=self._clock)).isoformat()

    # direct helpers for arranging state

    def add_team(self, name: str, handle: str, invite_code: Optional[str] = None) -> dict:
        team = {
            "id": str(uuid.uuid4()),
            "name": name,
            "handle": handle,
            "invite_code": invite_code or secrets.token_hex(4),
            "created_at": self.now(),
        }
        self.tables["teams"].append(team)
        return team

    def add_profile(self, user_id: str, team_id: str, full_name: Optional[str] = None) -> dict:
        profile = {
            "id": user_id, "team_id": team_id, "full_name": full_name, "created_at": self.now()
        }
        self.tables["profiles"].append(profile)
        return profile

    def add_post(self, team_id: str, content: str, author_id: Optional[str] = None) -> dict:
        post = {
            "id": str(uuid.uuid4()), "team_id": team_id, "author_id": author_id,
            "content": content, "created_at": self.now(),
        }
        self.tables["posts"].append(post)
        return post

    def add_follow(self, follower: str, following: str) -> dict:
        edge = {"follower_team_id": follower, "following_team_id": following, "created_at": self.now()}
        self.tables["follows"].append(edge)
        return edge

    # constraint checks

    def _check_insert(self, table: str, row: dict):
        rows = self.tables[table]
        if table == "teams":
            if any(t["handle"] == row["handle"] for t in rows):
                raise api_error("23505", 'duplicate key value violates unique constraint "teams_handle_key"')
            if any(t["invite_code"] == row["invite_code"] for t in rows):
                raise api_error("23505", 'duplicate key value violates unique constraint "teams_invite_code_key"')
        elif table == "profiles":
            if any(p["id"] == row["id"] for p in rows):
                raise api_error("23505", 'duplicate key value violates unique constraint "profiles_pkey"')
            self._check_team(row["team_id"])
        elif table == "posts":
            if not 1 <= len(row["content"]) <= 500:
                raise api_error("23514", 'new row violates check constraint "posts_content_check"')
            self._check_team(row["team_id"])
        elif table == "follows":
            if row["follower_team_id"] == row["following_team_id"]:
                raise api_error("23514", 'new row violates check constraint "follows_no_self"')
            if any(
                f["follower_team_id"] == row["follower_team_id"]
                and f["following_team_id"] == row["following_team_id"]
                for f in rows
            ):
                raise api_error("23505", 'duplicate key value violates unique constraint "follows_pkey"')

    def _check_team(self, team_id: str):
        if not any(t["id"] == team_id for t in self.tables["teams"]):
            raise api_error("23503", "insert or update violates foreign key constraint")

    def _check_team_privileges(self, query: "FakeQuery"):
        """Clients may only select the public team columns; writes go through procedures."""
        if query.op != "select" or query.columns == "*" or "invite_code" in query.columns:
            raise api_error("42501", "permission denied for table teams")

    def _team_of(self, user_id: Optional[str]) -> Optional[str]:
        profile = next((p for p in self.tables["profiles"] if p["id"] == user_id), None)
        return profile["team_id"] if profile else None

    def _embed(self, columns: str, row: dict) -> dict:
        row = dict(row)
        if "teams(" in columns:
            team = next((t for t in self.tables["teams"] if t["id"] == row["team_id"]), None)
            row["teams"] = {"name": team["name"], "handle": team["handle"]} if team else None
        elif columns not in ("*", ""):
            wanted = [c.strip() for c in columns.split(",")]
            row = {k: v for k, v in row.items() if k in wanted}
        return row

    def run(self, query: "FakeQuery") -> SimpleNamespace:
        with self.lock:
            self.calls.append((query.table, query.op))
            if self.fail_next is not None:
                error, self.fail_next = self.fail_next, None
                raise error
            if query.table == "teams":
                self._check_team_privileges(query)
            rows = self.tables[query.table]
            matches = [r for r in rows if all(r.get(c) == v for c, v in query.filters)]

            if query.op == "insert":
                row = dict(query.payload)
                if query.table == "posts":
                    row.setdefault("id", str(uuid.uuid4()))
                row.setdefault("created_at", self.now())
                self._check_insert(query.table, row)
                rows.append(row)
                return SimpleNamespace(data=[row], count=None)

            if query.op == "update":
                for r in matches:
                    r.update(query.payload)
                return SimpleNamespace(data=[dict(r) for r in matches], count=None)

            if query.op == "delete":
                self.tables[query.table] = [r for r in rows if r not in matches]
                return SimpleNamespace(data=[dict(r) for r in matches], count=None)

            if query.order_by:
                matches = sorted(matches, key=lambda r: r[query.order_by], reverse=query.desc)
            if query.limit_n is not None:
                matches = matches[:query.limit_n]
            count = len(matches) if query.count else None
            data = [] if query.head else [self._embed(query.columns, r) for r in matches]
            return SimpleNamespace(data=data, count=count)

    def rpc(self, name: str, params: dict, caller: Optional[str] = None) -> SimpleNamespace:
        with self.lock:
            self.calls.append((name, "rpc"))
            if self.fail_next is not None:
                error, self.fail_next = self.fail_next, None
                raise error
            if name == "find_team_by_invite_code":
                rows = [
                    {k: t[k] for k in ("id", "name", "handle", "created_at")}
                    for t in self.tables["teams"] if t["invite_code"] == params["_invite_code"]
                ]
                return SimpleNamespace(data=rows[:1])
            if name == "team_invite_code":
                if params["_team_id"] != self._team_of(caller):
                    return SimpleNamespace(data=None)
                team = next(t for t in self.tables["teams"] if t["id"] == params["_team_id"])
                return SimpleNamespace(data=team["invite_code"])
            if name == "regenerate_invite_code":
                if params["_team_id"] != self._team_of(caller):
                    raise api_error("42501", "not_authorized")
                code = params["_invite_code"]
                if any(t["invite_code"] == code and t["id"] != params["_team_id"] for t in self.tables["teams"]):
                    raise api_error("23505", 'duplicate key value violates unique constraint "teams_invite_code_key"')
                for t in self.tables["teams"]:
                    if t["id"] == params["_team_id"]:
                        t["invite_code"] = code
                return SimpleNamespace(data=None)
            if name == "create_team_and_profile":
                team = {
                    "id": str(uuid.uuid4()),
                    "name": params["_team_name"],
                    "handle": params["_team_handle"],
                    "invite_code": secrets.token_hex(4),
                    "created_at": self.now(),
                }
                profile = {
                    "id": params["_user_id"], "team_id": team["id"],
                    "full_name": params["_full_name"], "created_at": self.now(),
                }
                self._check_insert("teams", team)
                self.tables["teams"].append(team)
                try:
                    self._check_insert("profiles", profile)
                except APIError:
                    self.tables["teams"].remove(team)
                    raise
                self.tables["profiles"].append(profile)
                return SimpleNamespace(data=team["id"])
            if name == "join_team":
                team = next(
                    (t for t in self.tables["teams"]
                     if t["id"] == params["_team_id"] and t["invite_code"] == params["_invite_code"]),
                    None,
                )
                if team is None:
                    raise api_error("P0001", "invalid_invite_code")
                profile = {
                    "id": params["_user_id"], "team_id": team["id"],
                    "full_name": params["_full_name"], "created_at": self.now(),
                }
                self._check_insert("profiles", profile)
                self.tables["profiles"].append(profile)
                return SimpleNamespace(data=team["id"])
        raise api_error("42883", f"function {name} does not exist")


class FakeQuery:
    def __init__(self, db: FakeDatabase, table: str):
        self.db = db
        self.table = table
        self.op = "select"
        self.columns = "*"
        self.filters: List[tuple] = []
        self.order_by: Optional[str] = None
        self.desc = False
        self.limit_n: Optional[int] = None
        self.payload: Optional[dict] = None
        self.count = None
        self.head = False

    def select(self, columns: str = "*", count=None, head=None):
        self.columns = columns
        self.count = count
        self.head = bool(head)
        return self

    def insert(self, payload: dict):
        self.op, self.payload = "insert", payload
        return self

    def update(self, payload: dict):
        self.op, self.payload = "update", payload
        return self

    def delete(self):
        self.op = "delete"
        return self

    def eq(self, column: str, value):
        self.filters.append((column, value))
        return self

    def order(self, column: str, desc: bool = False):
        self.order_by, self.desc = column, desc
        return self

    def limit(self, n: int):
        self.limit_n = n
        return self

    def execute(self):
        return self.db.run(self)


class FakeRpc:
    def __init__(self, db: FakeDatabase, name: str, params: dict, caller: Optional[str] = None):
        self.db, self.name, self.params, self.caller = db, name, params, caller

    def execute(self):
        return self.db.rpc(self.name, self.params, self.caller)


class FakeAuthDirectory:
    """Registered users, shared by every per-request FakeAuth."""

    def __init__(self):
        self.users: Dict[str, dict] = {}
        self.require_confirmation = False
        self.oauth_codes: Dict[str, str] = {}
        # rewrite the session cookie on every read, as a token refresh does
        self.refresh_sessions = False

    def register(self, email: str, password: str = "secret123", full_name: Optional[str] = None) -> dict:
        user = {"id": str(uuid.uuid4()), "email": email, "password": password, "full_name": full_name}
        self.users[email] = user
        return user

    def by_id(self, user_id: str) -> Optional[dict]:
        return next((u for u in self.users.values() if u["id"] == user_id), None)


def _user_obj(user: dict) -> SimpleNamespace:
    metadata = {"full_name": user["full_name"]} if user["full_name"] else {}
    return SimpleNamespace(id=user["id"], email=user["email"], user_metadata=metadata)


class FakeAuth:
    def __init__(self, directory: FakeAuthDirectory, storage):
        self.directory = directory
        self.storage = storage

    def _start_session(self, user: dict) -> SimpleNamespace:
        self.storage.set_item(SESSION_KEY, user["id"])
        return SimpleNamespace(access_token=f"token-{user['id']}")

    def get_session(self):
        user_id = self.storage.get_item(SESSION_KEY)
        if not user_id:
            return None
        if self.directory.refresh_sessions:
            self.storage.set_item(SESSION_KEY, user_id)
        return SimpleNamespace(access_token=f"token-{user_id}")

    def get_user(self, jwt: Optional[str] = None):
        user = self.directory.by_id((jwt or "").replace("token-", "", 1))
        if user is None:
            self.storage.remove_item(SESSION_KEY)
            raise AuthError("Invalid JWT", None)
        return SimpleNamespace(user=_user_obj(user))

    def sign_in_with_password(self, credentials: dict):
        user = self.directory.users.get(credentials["email"])
        if user is None or user["password"] != credentials["password"]:
            raise AuthError("Invalid login credentials", None)
        session = self._start_session(user)
        return SimpleNamespace(user=_user_obj(user), session=session)

    def sign_up(self, credentials: dict):
        if credentials["email"] in self.directory.users:
            raise AuthError("User already registered", None)
        full_name = credentials.get("options", {}).get("data", {}).get("full_name")
        user = self.directory.register(credentials["email"], credentials["password"], full_name)
        session = None if self.directory.require_confirmation else self._start_session(user)
        return SimpleNamespace(user=_user_obj(user), session=session)

    def sign_in_with_oauth(self, credentials: dict):
        self.storage.set_item(f"{SESSION_KEY}-code-verifier", "verifier")
        redirect_to = credentials["options"]["redirect_to"]
        return SimpleNamespace(
            provider=credentials["provider"],
            url=f"https://auth.example.test/authorize?provider={credentials['provider']}&redirect_to={redirect_to}",
        )

    def exchange_code_for_session(self, params: dict):
        email = self.directory.oauth_codes.get(params["auth_code"])
        if email is None or not self.storage.get_item(f"{SESSION_KEY}-code-verifier"):
            raise AuthError("invalid flow state, no valid flow state found", None)
        self.storage.remove_item(f"{SESSION_KEY}-code-verifier")
        user = self.directory.users[email]
        session = self._start_session(user)
        return SimpleNamespace(user=_user_obj(user), session=session)

    def sign_out(self):
        self.storage.remove_item(SESSION_KEY)


class FakePostgrest:
    def __init__(self):
        self.token: Optional[str] = None

    def auth(self, token: str):
        self.token = token


class FakeSupabase:
    def __init__(self, db: FakeDatabase, directory: Optional[FakeAuthDirectory] = None, storage=None):
        self.db = db
        self.storage = storage if storage is not None else supabase_client.CookieStorage({})
        self.auth = FakeAuth(directory or FakeAuthDirectory(), self.storage)
        self.postgrest = FakePostgrest()

    def table(self, name: str) -> FakeQuery:
        return FakeQuery(self.db, name)

    def rpc(self, name: str, params: dict) -> FakeRpc:
        caller = self.postgrest.token.replace("token-", "", 1) if self.postgrest.token else None
        return FakeRpc(self.db, name, params, caller)


@pytest.fixture
def db() -> FakeDatabase:
    return FakeDatabase()


@pytest.fixture
def directory() -> FakeAuthDirectory:
    return FakeAuthDirectory()


@pytest.fixture
def supabase(db, directory) -> FakeSupabase:
    return FakeSupabase(db, directory)


@pytest.fixture
def user(directory) -> CurrentUser:
    record = directory.register("jane@example.com", full_name="Jane Doe")
    return CurrentUser(id=record["id"], email=record["email"], full_name=record["full_name"])


@pytest.fixture
def client(db, directory, monkeypatch):
    """TestClient whose requests each get a FakeSupabase over the shared database"""
    monkeypatch.setattr(
        supabase_client,
        "create_request_client",
        lambda storage: FakeSupabase(db, directory, storage),
    )
    monkeypatch.setattr(limiter, "enabled", False)
    from app.main import app

    with TestClient(app) as test_client:
        yield test_client
