"""
Shared fixtures: an in-memory stand-in for the Supabase client and a
TestClient wired to it through dependency overrides.

FakeSupabase hands out queued responses per table (or "rpc:<name>") in the
order they were queued and records every executed query chain, so tests can
assert both on results and on the filters a service applied.
"""

from collections import defaultdict
from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient


class FakeResponse:
    def __init__(self, data=None, count=None):
        self.data = data if data is not None else []
        self.count = count


class FakeQuery:
    """Chainable query builder; every call is recorded and returns self."""

    def __init__(self, client, name):
        self.client = client
        self.name = name
        self.calls = []

    def __getattr__(self, method):
        if method.startswith("__"):
            raise AttributeError(method)

        def record(*args, **kwargs):
            self.calls.append((method, args, kwargs))
            return self
        return record

    @property
    def not_(self):
        self.calls.append(("not_", (), {}))
        return self

    def execute(self):
        self.client.executed.append((self.name, self.calls))
        queue = self.client.responses.get(self.name)
        if queue:
            response = queue.pop(0)
            if isinstance(response, Exception):
                raise response
            return response
        return FakeResponse([], 0)


class FakeBucket:
    def __init__(self, storage, name):
        self.storage = storage
        self.name = name

    def upload(self, path, data, options=None):
        self.storage.uploads.append((self.name, path, data, options))
        return {"path": path}

    def get_public_url(self, path):
        return f"https://storage.test/{self.name}/{path}"

    def remove(self, paths):
        self.storage.removed.append((self.name, list(paths)))
        return []


class FakeStorage:
    def __init__(self):
        self.uploads = []
        self.removed = []

    def from_(self, bucket):
        return FakeBucket(self, bucket)


class FakeSupabase:
    def __init__(self):
        self.responses = defaultdict(list)
        self.executed = []
        self.storage = FakeStorage()
        self.auth = MagicMock()

    def queue(self, name, data=None, count=None):
        self.responses[name].append(FakeResponse(data, count))
        return self

    def fail(self, name, error):
        self.responses[name].append(error)
        return self

    def table(self, name):
        return FakeQuery(self, name)

    def rpc(self, name, params=None):
        query = FakeQuery(self, f"rpc:{name}")
        query.calls.append(("rpc", (params,), {}))
        return query

    def queries(self, name):
        """Recorded call chains executed against a table, oldest first"""
        return [calls for executed, calls in self.executed if executed == name]

    @staticmethod
    def methods(calls):
        return [method for method, _, _ in calls]

    @staticmethod
    def args_of(calls, method):
        return [args for name, args, _ in calls if name == method]


# =============================================================================
# Fixtures
# =============================================================================

USER = {"id": "user-1", "email": "creator@example.com"}
ADMIN = {"id": "admin-1", "email": "admin@example.com"}


@pytest.fixture
def supabase():
    return FakeSupabase()


@pytest.fixture
def client(supabase):
    """TestClient with every Supabase dependency pointed at the fake."""
    from app.database.supabase_client import get_supabase, get_service_supabase, get_session_supabase
    from app.main import app

    app.dependency_overrides[get_supabase] = lambda: supabase
    app.dependency_overrides[get_service_supabase] = lambda: supabase
    app.dependency_overrides[get_session_supabase] = lambda: supabase
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def as_user(client):
    """Authenticate requests as a regular user."""
    from app.core.dependencies import get_current_user_id
    from app.main import app

    app.dependency_overrides[get_current_user_id] = lambda: USER
    return USER


@pytest.fixture
def as_admin(client):
    from app.core.dependencies import get_current_user_id
    from app.main import app

    app.dependency_overrides[get_current_user_id] = lambda: ADMIN
    return ADMIN
