"""
Shared fixtures: a fresh SQLite database per test, an in-memory Redis stand-in,
a pinned request clock and helpers for signed user requests.
"""

import asyncio
import json
import os
import tempfile
from datetime import datetime

_DB_DIR = tempfile.mkdtemp(prefix="marketplace-tests-")

# Settings are read at import time, so the environment is prepared first
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{_DB_DIR}/test.db"
os.environ["REDIS_URL"] = "redis://localhost:6379/15"
os.environ["SECRET_KEY"] = "test-secret"
os.environ["ADMIN_USER"] = "admin"
os.environ["ADMIN_PASS"] = "test-pass"
os.environ["ENVIRONMENT"] = "test"

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

import models  # noqa: E402,F401
from apps.api.deps import get_now, get_redis_client  # noqa: E402
from apps.api.main import app  # noqa: E402
from core.db import Base, engine  # noqa: E402
from core.security import sign_request  # noqa: E402

NOW = datetime(2026, 3, 2, 9, 0, 0)
ADMIN = ("admin", "test-pass")


class FakeRedis:
    """In-memory stand-in for the handful of Redis commands the app uses."""

    def __init__(self):
        self.values = {}
        self.ttls = {}
        self.sets = {}

    async def setnx(self, key, value):
        if key in self.values:
            return False
        self.values[key] = value
        return True

    async def expire(self, key, seconds):
        self.ttls[key] = seconds
        return key in self.values

    async def incr(self, key):
        self.values[key] = int(self.values.get(key, 0)) + 1
        return self.values[key]

    async def delete(self, *keys):
        removed = [k for k in keys if k in self.values]
        for k in removed:
            del self.values[k]
            self.ttls.pop(k, None)
        return len(removed)

    async def sadd(self, key, *members):
        target = self.sets.setdefault(key, set())
        added = [m for m in members if m not in target]
        target.update(added)
        return len(added)

    async def smembers(self, key):
        return set(self.sets.get(key, set()))

    async def srem(self, key, *members):
        target = self.sets.get(key, set())
        removed = [m for m in members if m in target]
        target.difference_update(removed)
        return len(removed)

    async def ping(self):
        return True


class Clock:
    def __init__(self, now):
        self.now = now


async def _reset_schema():
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)


# ────────────────────────────────
# Fixtures
# ────────────────────────────────
@pytest.fixture(autouse=True)
def database():
    """Recreate all tables before every test."""
    asyncio.run(_reset_schema())
    yield


@pytest.fixture
def fake_redis():
    return FakeRedis()


@pytest.fixture
def clock():
    """Pinned request time; tests may move `clock.now`."""
    return Clock(NOW)


@pytest.fixture
def client(fake_redis, clock):
    """TestClient with Redis and the request clock overridden."""
    app.dependency_overrides[get_redis_client] = lambda: fake_redis
    app.dependency_overrides[get_now] = lambda: clock.now
    yield TestClient(app)
    app.dependency_overrides.clear()


# ────────────────────────────────
# Signed request helpers
# ────────────────────────────────
def signed(user_id, payload=None):
    """Keyword arguments for a TestClient call signed as `user_id`."""
    body = json.dumps(payload).encode() if payload is not None else b""
    headers = {"X-User-Id": user_id, "X-Signature": sign_request(body)}
    if payload is None:
        return {"headers": headers}
    headers["Content-Type"] = "application/json"
    return {"content": body, "headers": headers}


def report_payload(**overrides):
    payload = {
        "reported_space_id": "space-1",
        "type": "spam",
        "reason": "Listing posted repeatedly",
        "description": "The same desk is listed five times with different prices.",
        "evidence": ["https://cdn.example.com/shot-1.png"],
    }
    payload.update(overrides)
    return payload


def booking_payload(**overrides):
    payload = {
        "space": "space-1",
        "start_time": "2026-03-05T10:00:00Z",
        "end_time": "2026-03-05T12:00:00Z",
    }
    payload.update(overrides)
    return payload
