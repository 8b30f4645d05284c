# =============================================================================
# tests/fakes.py - In-Memory Supabase Double
# =============================================================================
# A small stand-in for the supabase-py client covering the query-builder
# calls the services make. Tables are plain lists of dicts.
#
# Usage:
#   db = FakeSupabase()
#   db.seed("clients", [{"name": "Jane Doe", "email": "jane@example.com"}])
#   SupabaseClient.set_client(db)
# =============================================================================

import copy
from datetime import datetime, timezone
from typing import Any
from uuid import UUID, uuid4


def _plain(value: Any) -> Any:
    return str(value) if isinstance(value, UUID) else value


def _comparable(value: Any) -> Any:
    """Timestamps compare as datetimes, everything else as-is."""
    if isinstance(value, str) and len(value) >= 10 and value[4:5] == "-" and value[7:8] == "-":
        try:
            dt = datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            return value
        if dt.tzinfo is None:
            dt = dt.replace(tzinfo=timezone.utc)
        return dt
    return value


class FakeResponse:
    def __init__(self, data: Any, count: int | None = None):
        self.data = data
        self.count = count


class FakeQuery:
    """Chainable builder mirroring supabase-py's table() API."""

    def __init__(self, db: "FakeSupabase", table: str):
        self.db = db
        self.table = table
        self._op = "select"
        self._columns = "*"
        self._count = None
        self._payload: Any = None
        self._filters: list = []
        self._order: list[tuple[str, bool]] = []
        self._limit: int | None = None
        self._range: tuple[int, int] | None = None
        self._single = False

    # -- operations ----------------------------------------------------------

    def select(self, columns: str = "*", count: str | None = None):
        self._columns = columns
        self._count = count
        return self

    def insert(self, data):
        self._op, self._payload = "insert", data
        return self

    def update(self, data):
        self._op, self._payload = "update", data
        return self

    def upsert(self, data, **kwargs):
        self._op, self._payload = "upsert", data
        return self

    def delete(self):
        self._op = "delete"
        return self

    # -- filters -------------------------------------------------------------

    def _add(self, column, predicate):
        self._filters.append((column, predicate))
        return self

    def eq(self, column, value):
        return self._add(column, lambda v: _plain(v) == _plain(value))

    def neq(self, column, value):
        return self._add(column, lambda v: _plain(v) != _plain(value))

    def lt(self, column, value):
        return self._add(column, lambda v: v is not None and _comparable(v) < _comparable(value))

    def lte(self, column, value):
        return self._add(column, lambda v: v is not None and _comparable(v) <= _comparable(value))

    def gt(self, column, value):
        return self._add(column, lambda v: v is not None and _comparable(v) > _comparable(value))

    def gte(self, column, value):
        return self._add(column, lambda v: v is not None and _comparable(v) >= _comparable(value))

    def in_(self, column, values):
        allowed = [_plain(v) for v in values]
        return self._add(column, lambda v: _plain(v) in allowed)

    def is_(self, column, value):
        if value in ("null", None):
            return self._add(column, lambda v: v is None)
        return self._add(column, lambda v: v == value)

    # -- modifiers -----------------------------------------------------------

    def order(self, column, desc: bool = False, **kwargs):
        self._order.append((column, desc))
        return self

    def limit(self, count: int):
        self._limit = count
        return self

    def range(self, start: int, end: int):
        self._range = (start, end)
        return self

    def single(self):
        self._single = True
        return self

    # -- execution -----------------------------------------------------------

    def _matches(self, row: dict) -> bool:
        return all(predicate(row.get(column)) for column, predicate in self._filters)

    def _project(self, row: dict) -> dict:
        if self._columns.strip() == "*":
            return copy.deepcopy(row)
        names = [c.strip() for c in self._columns.split(",")]
        return {name: copy.deepcopy(row.get(name)) for name in names}

    def _new_row(self, data: dict) -> dict:
        row = {k: _plain(v) for k, v in data.items()}
        row.setdefault("id", str(uuid4()))
        row.setdefault("created_at", datetime.now(timezone.utc).isoformat())
        return row

    def execute(self) -> FakeResponse:
        self.db.check_failure(self.table, self._op)
        rows = self.db.tables.setdefault(self.table, [])

        if self._op == "insert":
            payload = self._payload if isinstance(self._payload, list) else [self._payload]
            created = [self._new_row(item) for item in payload]
            rows.extend(created)
            return FakeResponse(copy.deepcopy(created))

        if self._op == "upsert":
            payload = self._payload if isinstance(self._payload, list) else [self._payload]
            result = []
            for item in payload:
                existing = next(
                    (r for r in rows if "id" in item and r.get("id") == _plain(item["id"])), None
                )
                if existing is not None:
                    existing.update({k: _plain(v) for k, v in item.items()})
                    result.append(existing)
                else:
                    row = self._new_row(item)
                    rows.append(row)
                    result.append(row)
            return FakeResponse(copy.deepcopy(result))

        matched = [r for r in rows if self._matches(r)]

        if self._op == "update":
            for row in matched:
                row.update({k: _plain(v) for k, v in self._payload.items()})
            return FakeResponse(copy.deepcopy(matched))

        if self._op == "delete":
            self.db.tables[self.table] = [r for r in rows if not self._matches(r)]
            return FakeResponse(copy.deepcopy(matched))

        for column, desc in reversed(self._order):
            present = [r for r in matched if r.get(column) is not None]
            missing = [r for r in matched if r.get(column) is None]
            present.sort(key=lambda r: _comparable(r[column]), reverse=desc)
            matched = missing + present if desc else present + missing

        total = len(matched)
        if self._range is not None:
            start, end = self._range
            matched = matched[start:end + 1]
        if self._limit is not None:
            matched = matched[: self._limit]

        data = [self._project(r) for r in matched]
        if self._single:
            return FakeResponse(data[0] if data else None, total if self._count else None)
        return FakeResponse(data, total if self._count else None)


class FakeBucket:
    def __init__(self, storage: "FakeStorage", name: str):
        self.storage = storage
        self.name = name

    @property
    def files(self) -> dict[str, bytes]:
        return self.storage.files.setdefault(self.name, {})

    def upload(self, path: str, file: bytes, file_options: dict | None = None):
        self.storage.check_failure(self.name, "upload")
        self.files[path] = file
        return {"path": path}

    def download(self, path: str) -> bytes:
        if path not in self.files:
            raise FileNotFoundError(path)
        return self.files[path]

    def get_public_url(self, path: str) -> str:
        return f"https://test-project.supabase.co/storage/v1/object/public/{self.name}/{path}"

    def create_signed_url(self, path: str, expires_in: int, options: dict | None = None) -> dict:
        return {
            "signedURL": f"https://test-project.supabase.co/storage/v1/object/sign/{self.name}/{path}?token=test",
        }

    def remove(self, paths: list[str]) -> list[dict]:
        removed = [p for p in paths if self.files.pop(p, None) is not None]
        self.storage.removed.extend(removed)
        return [{"name": p} for p in removed]

    def list(self, path: str | None = None, options: dict | None = None) -> list[dict]:
        """Direct children of a folder, named relative to it, like Supabase."""
        prefix = f"{path.strip('/')}/" if path else ""
        children = [name[len(prefix):] for name in self.files if name.startswith(prefix)]
        return [{"name": name} for name in children if "/" not in name]


class FakeStorage:
    def __init__(self):
        self.files: dict[str, dict[str, bytes]] = {}
        self.removed: list[str] = []
        self.failures: set[tuple[str, str]] = set()

    def from_(self, bucket: str) -> FakeBucket:
        return FakeBucket(self, bucket)

    def list_buckets(self) -> list[dict]:
        return [{"name": name} for name in self.files]

    def check_failure(self, bucket: str, op: str) -> None:
        if (bucket, op) in self.failures:
            raise RuntimeError(f"storage {op} failed for {bucket}")


class FakeAuthAdmin:
    def __init__(self):
        self.deleted_users: list[str] = []
        self.fail = False

    def delete_user(self, user_id: str):
        if self.fail:
            raise RuntimeError("User not found")
        self.deleted_users.append(_plain(user_id))


class FakeAuth:
    def __init__(self):
        self.admin = FakeAuthAdmin()


class FakeSupabase:
    """Drop-in for supabase.Client in SupabaseClient.set_client()."""

    def __init__(self):
        self.tables: dict[str, list[dict]] = {}
        self.failures: set[tuple[str, str]] = set()
        self.storage = FakeStorage()
        self.auth = FakeAuth()

    def table(self, name: str) -> FakeQuery:
        return FakeQuery(self, name)

    def fail_on(self, table: str, op: str) -> None:
        """Make every `op` ("select", "insert", ...) on `table` raise."""
        self.failures.add((table, op))

    def check_failure(self, table: str, op: str) -> None:
        if (table, op) in self.failures:
            raise RuntimeError(f"{op} on {table} failed")

    def seed(self, table: str, rows: list[dict]) -> list[dict]:
        """Insert rows directly, filling id and created_at. Returns the stored rows."""
        return self.table(table).insert(rows).execute().data

    def rows(self, table: str) -> list[dict]:
        return self.tables.get(table, [])
