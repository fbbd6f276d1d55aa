from __future__ import annotations

import copy
import importlib
import os
import uuid
from collections import defaultdict
from datetime import datetime, timedelta, timezone
from typing import Any, Callable

import pytest
from fastapi.testclient import TestClient
from jose import jwt

TEST_JWT_SECRET = "test-jwt-secret"

# Every module that imports `execute_query` by name gets the fake patched in.
STORE_MODULES = [
    "skillswap.core.supabase",
    "skillswap.services.skill_directory",
    "skillswap.services.user_skills",
    "skillswap.services.swap_lifecycle",
    "skillswap.services.rating_ledger",
    "skillswap.services.notification_relay",
    "skillswap.services.profile_service",
    "skillswap.services.admin_service",
    "skillswap.api.v1.endpoints.notifications",
]


def pytest_configure() -> None:
    # Never talk to a real Supabase project from the test suite.
    os.environ["SUPABASE_URL"] = ""
    os.environ["SUPABASE_KEY"] = ""
    os.environ["JWT_SECRET"] = TEST_JWT_SECRET
    os.environ["ENVIRONMENT"] = "test"


class FakeStore:
    """In-memory stand-in for the Supabase tables behind `execute_query`."""

    UNIQUE = {
        "skills": [("name",)],
        "user_skills": [("user_id", "skill_id", "direction")],
        "ratings": [("swap_request_id", "from_user_id")],
    }

    def __init__(self) -> None:
        self.tables: dict[str, list[dict[str, Any]]] = defaultdict(list)
        self.failures: dict[tuple[str, str], Exception] = {}
        self.calls: list[tuple[str, str]] = []

    # -- helpers for tests --------------------------------------------------

    def seed(self, table: str, **row: Any) -> dict[str, Any]:
        row.setdefault("id", str(uuid.uuid4()))
        row.setdefault("created_at", datetime.now().isoformat())
        self.tables[table].append(row)
        return row

    def rows(self, table: str, **filters: Any) -> list[dict[str, Any]]:
        return [r for r in self.tables[table] if self._matches(r, filters, None)]

    def fail(self, table: str, query_type: str, error: Exception) -> None:
        self.failures[(table, query_type)] = error

    def writes(self) -> list[tuple[str, str]]:
        return [c for c in self.calls if c[1] != "select"]

    # -- execute_query contract ---------------------------------------------

    @staticmethod
    def _matches(row: dict[str, Any], filters: dict[str, Any] | None, or_filter: str | None) -> bool:
        for key, value in (filters or {}).items():
            if isinstance(value, dict):
                operator, operand = next(iter(value.items()))
                if operator == "eq" and row.get(key) != operand:
                    return False
                if operator == "neq" and row.get(key) == operand:
                    return False
                if operator == "in" and row.get(key) not in list(operand):
                    return False
            elif row.get(key) != value:
                return False

        if or_filter:
            clauses = [clause.split(".", 2) for clause in or_filter.split(",")]
            if not any(str(row.get(column)) == operand for column, _, operand in clauses):
                return False
        return True

    def _check_unique(self, table: str, row: dict[str, Any]) -> None:
        from skillswap.core.exceptions import StoreError

        for columns in self.UNIQUE.get(table, []):
            for existing in self.tables[table]:
                if all(existing.get(c) == row.get(c) for c in columns):
                    raise StoreError(
                        f'duplicate key value violates unique constraint "{table}_{"_".join(columns)}_key"',
                        code="23505",
                    )

    async def execute_query(
        self,
        table: str,
        query_type: str,
        data: dict[str, Any] | None = None,
        filters: dict[str, Any] | None = None,
        select: str = "*",
        limit: int | None = None,
        order_by: dict[str, str] | None = None,
        or_filter: str | None = None,
        on_conflict: str | None = None,
    ) -> list[dict[str, Any]]:
        self.calls.append((table, query_type))
        if (table, query_type) in self.failures:
            raise self.failures[(table, query_type)]

        rows = self.tables[table]

        if query_type == "select":
            result = [copy.deepcopy(r) for r in rows if self._matches(r, filters, or_filter)]
            for key, direction in reversed(list((order_by or {}).items())):
                result.sort(key=lambda r: str(r.get(key) or ""), reverse=direction == "desc")
            return result[:limit] if limit else result

        if query_type in ("insert", "upsert"):
            row = copy.deepcopy(data)
            if query_type == "upsert" and on_conflict:
                columns = on_conflict.split(",")
                if any(all(r.get(c) == row.get(c) for c in columns) for r in rows):
                    return []
            self._check_unique(table, row)
            row.setdefault("id", str(uuid.uuid4()))
            row.setdefault("created_at", datetime.now().isoformat())
            rows.append(row)
            return [copy.deepcopy(row)]

        if query_type == "update":
            updated = []
            for r in rows:
                if self._matches(r, filters, None):
                    r.update(copy.deepcopy(data))
                    updated.append(copy.deepcopy(r))
            return updated

        if query_type == "delete":
            deleted = [r for r in rows if self._matches(r, filters, None)]
            self.tables[table] = [r for r in rows if r not in deleted]
            return [copy.deepcopy(r) for r in deleted]

        raise ValueError(f"Invalid query type: {query_type}")


@pytest.fixture()
def store(monkeypatch: pytest.MonkeyPatch) -> FakeStore:
    from skillswap.core.config import get_settings

    get_settings.cache_clear()
    fake = FakeStore()
    for name in STORE_MODULES:
        monkeypatch.setattr(importlib.import_module(name), "execute_query", fake.execute_query)
    return fake


@pytest.fixture()
def make_user(store: FakeStore) -> Callable[..., Any]:
    """Seed a profile plus its skill entries and return the user's session."""
    from skillswap.schemas.user import UserSession

    def _skill_id(name: str) -> str:
        existing = store.rows("skills", name=name)
        if existing:
            return existing[0]["id"]
        return store.seed("skills", name=name, category="Other")["id"]

    def _make_user(
        name: str,
        offered: tuple[str, ...] = (),
        wanted: tuple[str, ...] = (),
        **profile: Any,
    ) -> UserSession:
        row = store.seed(
            "profiles",
            name=name,
            location=profile.pop("location", None),
            availability=[],
            is_public=profile.pop("is_public", True),
            is_admin=profile.pop("is_admin", False),
            is_banned=profile.pop("is_banned", False),
            rating=0,
            total_swaps=0,
            **profile,
        )
        for skill in offered:
            store.seed("user_skills", user_id=row["id"], skill_id=_skill_id(skill), direction="offered")
        for skill in wanted:
            store.seed("user_skills", user_id=row["id"], skill_id=_skill_id(skill), direction="wanted")
        return UserSession(
            user_id=row["id"],
            name=name,
            is_admin=row["is_admin"],
            is_banned=row["is_banned"],
        )

    return _make_user


def make_token(user_id: str, secret: str = TEST_JWT_SECRET, **claims: Any) -> str:
    payload = {
        "sub": user_id,
        "aud": "authenticated",
        "exp": datetime.now(timezone.utc) + timedelta(minutes=30),
        **claims,
    }
    return jwt.encode(payload, secret, algorithm="HS256")


@pytest.fixture()
def token_for() -> Callable[..., str]:
    def _token(session: Any, **claims: Any) -> str:
        return make_token(session.user_id, **claims)

    return _token


@pytest.fixture()
def auth_headers(token_for: Callable[..., str]) -> Callable[..., dict[str, str]]:
    def _headers(session: Any) -> dict[str, str]:
        return {"Authorization": f"Bearer {token_for(session)}"}

    return _headers


@pytest.fixture()
def client(store: FakeStore) -> Any:
    from skillswap.main import app

    with TestClient(app) as c:
        yield c
