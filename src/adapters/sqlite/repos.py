"""
SQLite Profile Store (ProfileStorePort implementation).

Profiles live in one JSON document column. Conditions are compiled into the
WHERE clause of a single UPDATE, so SQLite evaluates them against the row the
write applies to: an UPDATE that touches zero rows is a failed condition.

Absent vs null is read with json_type(): NULL for a missing path, 'null' for
a JSON null.
"""

from __future__ import annotations

import json
import logging
import sqlite3
from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from typing import Any

from pydantic import ValidationError

from src.adapters.clock import SystemClock
from src.adapters.documents import check_writable, project
from src.core.ports.store import (
    AllOf,
    AlreadyExistsError,
    AnyOf,
    AttributeExists,
    AttributeIsNull,
    Condition,
    ConditionFailedError,
    Equals,
    LessThan,
    NotEquals,
    ProfilePage,
    Projection,
    RejectedError,
    to_json_value,
)
from src.core.ports.time import TimePort
from src.domain.entities import Profile

logger = logging.getLogger(__name__)


def _path(field_name: str) -> str:
    return f"$.{field_name}"


def _param(value: Any) -> Any:
    value = to_json_value(value)
    if isinstance(value, bool):
        return int(value)
    return value


def compile_condition(condition: Condition) -> tuple[str, list[Any]]:
    """Translate a Condition into a SQL boolean expression over `data`."""
    if isinstance(condition, AttributeExists):
        op = "IS NOT NULL" if condition.exists else "IS NULL"
        return f"json_type(data, ?) {op}", [_path(condition.field)]
    if isinstance(condition, AttributeIsNull):
        return "json_type(data, ?) = 'null'", [_path(condition.field)]
    if isinstance(condition, Equals):
        return "json_extract(data, ?) = ?", [_path(condition.field), _param(condition.value)]
    if isinstance(condition, NotEquals):
        path = _path(condition.field)
        return (
            "(json_extract(data, ?) IS NULL OR json_extract(data, ?) <> ?)",
            [path, path, _param(condition.value)],
        )
    if isinstance(condition, LessThan):
        return "json_extract(data, ?) < ?", [_path(condition.field), _param(condition.value)]
    if isinstance(condition, AllOf | AnyOf):
        if not condition.conditions:
            return ("1", []) if isinstance(condition, AllOf) else ("0", [])
        joiner = " AND " if isinstance(condition, AllOf) else " OR "
        parts: list[str] = []
        params: list[Any] = []
        for child in condition.conditions:
            sql, child_params = compile_condition(child)
            parts.append(sql)
            params.extend(child_params)
        return f"({joiner.join(parts)})", params
    raise TypeError(f"Unsupported condition: {condition!r}")


class SQLiteRepoBase:
    """Base class for SQLite repositories."""

    def __init__(self, db_path: str, timeout_seconds: float = 30.0):
        self.db_path = db_path
        self._timeout = timeout_seconds

    def _get_conn(self) -> sqlite3.Connection:
        # Autocommit mode; writes take the write lock up front (BEGIN IMMEDIATE).
        return sqlite3.connect(self.db_path, timeout=self._timeout, isolation_level=None)

    @contextmanager
    def _write(self) -> Iterator[sqlite3.Connection]:
        conn = self._get_conn()
        try:
            conn.execute("BEGIN IMMEDIATE")
            try:
                yield conn
            except BaseException:
                conn.rollback()
                raise
            conn.commit()
        finally:
            conn.close()


class SQLiteProfileStore(SQLiteRepoBase):
    """SQLite implementation of ProfileStorePort."""

    def __init__(
        self,
        db_path: str,
        time: TimePort | None = None,
        timeout_seconds: float = 30.0,
    ):
        super().__init__(db_path, timeout_seconds)
        self._time = time or SystemClock()

    def get(self, profile_id: str, projection: Projection = Projection.FULL) -> Profile | None:
        conn = self._get_conn()
        try:
            row = conn.execute("SELECT data FROM profiles WHERE id = ?", (profile_id,)).fetchone()
        finally:
            conn.close()
        return project(json.loads(row[0]), projection, "/get_profile") if row else None

    def create(self, profile: Profile) -> Profile:
        doc = profile.model_dump(mode="json")
        try:
            with self._write() as conn:
                conn.execute(
                    "INSERT INTO profiles (id, data) VALUES (?, ?)",
                    (profile.id, json.dumps(doc)),
                )
        except sqlite3.IntegrityError as e:
            raise AlreadyExistsError(profile.id) from e
        logger.debug("Created profile %s", profile.id)
        return Profile.model_validate(doc)

    def update(
        self,
        profile_id: str,
        changes: Mapping[str, Any],
        condition: Condition | None = None,
    ) -> Profile:
        check_writable(changes)

        set_args: list[Any] = []
        values = {**changes, "updated_at": self._time.now_utc()}
        for name, value in values.items():
            set_args.extend([_path(name), json.dumps(to_json_value(value))])
        placeholders = ", ".join("?, json(?)" for _ in values)

        where_sql, where_params = ("1", [])
        if condition is not None:
            where_sql, where_params = compile_condition(condition)

        with self._write() as conn:
            cursor = conn.execute(
                f"UPDATE profiles SET data = json_set(data, {placeholders}) "
                f"WHERE id = ? AND {where_sql}",
                [*set_args, profile_id, *where_params],
            )
            if cursor.rowcount == 0:
                raise ConditionFailedError(profile_id)

            row = conn.execute("SELECT data FROM profiles WHERE id = ?", (profile_id,)).fetchone()
            try:
                return Profile.model_validate(json.loads(row[0]))
            except ValidationError as e:
                raise RejectedError(str(e)) from e

    def list_profiles(
        self,
        where: Condition | None = None,
        cursor: str | None = None,
        page_size: int = 50,
        projection: Projection = Projection.FULL,
    ) -> ProfilePage:
        offset = int(cursor) if cursor else 0
        where_sql, where_params = ("1", [])
        if where is not None:
            where_sql, where_params = compile_condition(where)

        conn = self._get_conn()
        try:
            rows = conn.execute(
                f"SELECT data FROM profiles WHERE {where_sql} ORDER BY id LIMIT ? OFFSET ?",
                [*where_params, page_size + 1, offset],
            ).fetchall()
        finally:
            conn.close()

        window = rows[:page_size]
        items = [
            project(json.loads(r[0]), projection, f"/list_profiles/items/{offset + i}")
            for i, r in enumerate(window)
        ]
        next_cursor = str(offset + page_size) if len(rows) > page_size else None
        return ProfilePage(items=items, cursor=next_cursor)

    def put_raw(self, doc: Mapping[str, Any]) -> None:
        """Insert or replace a document as-is (legacy rows, imports)."""
        conn = self._get_conn()
        try:
            conn.execute(
                "INSERT OR REPLACE INTO profiles (id, data) VALUES (?, ?)",
                (str(doc["id"]), json.dumps(to_json_value(dict(doc)))),
            )
        finally:
            conn.close()

    def raw(self, profile_id: str) -> dict[str, Any] | None:
        conn = self._get_conn()
        try:
            row = conn.execute("SELECT data FROM profiles WHERE id = ?", (profile_id,)).fetchone()
            return json.loads(row[0]) if row else None
        finally:
            conn.close()
