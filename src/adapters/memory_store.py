"""
In-memory profile store.

Implements ProfileStorePort for tests and single-process dev runs. Records
are kept as JSON-form documents so "attribute absent" and "attribute null"
stay distinguishable, as they are in a document store.

Every operation runs under one lock, so a condition is evaluated against the
exact state the write applies to.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Mapping
from typing import Any

from pydantic import ValidationError

from src.adapters.clock import SystemClock
from src.adapters.documents import check_writable, project
from src.core.ports.store import (
    AlreadyExistsError,
    Condition,
    ConditionFailedError,
    ProfilePage,
    Projection,
    RejectedError,
    to_json_value,
)
from src.core.ports.time import TimePort
from src.domain.entities import Profile

logger = logging.getLogger(__name__)


class InMemoryProfileStore:
    """Dictionary-backed profile store with atomic conditional writes."""

    def __init__(self, time: TimePort | None = None) -> None:
        self._docs: dict[str, dict[str, Any]] = {}
        self._lock = threading.Lock()
        self._time = time or SystemClock()
        self.update_calls: list[tuple[str, dict[str, Any]]] = []

    # --- Port methods ---

    def get(self, profile_id: str, projection: Projection = Projection.FULL) -> Profile | None:
        with self._lock:
            doc = self._docs.get(profile_id)
            if doc is None:
                return None
            return project(doc, projection, "/get_profile")

    def create(self, profile: Profile) -> Profile:
        doc = profile.model_dump(mode="json")
        with self._lock:
            if profile.id in self._docs:
                raise AlreadyExistsError(profile.id)
            self._docs[profile.id] = doc
        logger.debug("Created profile %s", profile.id)
        return Profile.model_validate(doc)

    def update(
        self,
        profile_id: str,
        changes: Mapping[str, Any],
        condition: Condition | None = None,
    ) -> Profile:
        check_writable(changes)
        values = {k: to_json_value(v) for k, v in changes.items()}
        with self._lock:
            self.update_calls.append((profile_id, dict(changes)))
            doc = self._docs.get(profile_id)
            if doc is None:
                raise ConditionFailedError(profile_id)
            if condition is not None and not condition.evaluate(doc):
                raise ConditionFailedError(profile_id)

            new_doc = {**doc, **values}
            new_doc["updated_at"] = to_json_value(self._time.now_utc())
            try:
                updated = Profile.model_validate(new_doc)
            except ValidationError as e:
                raise RejectedError(str(e)) from e
            self._docs[profile_id] = new_doc
            return updated

    def list_profiles(
        self,
        where: Condition | None = None,
        cursor: str | None = None,
        page_size: int = 50,
        projection: Projection = Projection.FULL,
    ) -> ProfilePage:
        start = int(cursor) if cursor else 0
        with self._lock:
            matched = [
                self._docs[pid]
                for pid in sorted(self._docs)
                if where is None or where.evaluate(self._docs[pid])
            ]
            window = matched[start : start + page_size]
            items = [
                project(doc, projection, f"/list_profiles/items/{start + i}")
                for i, doc in enumerate(window)
            ]
        end = start + len(window)
        return ProfilePage(items=items, cursor=str(end) if end < len(matched) else None)

    # --- Test/dev helpers ---

    def put_raw(self, doc: Mapping[str, Any]) -> None:
        """Insert a document as-is (e.g. a legacy row missing required fields)."""
        with self._lock:
            self._docs[str(doc["id"])] = dict(doc)

    def raw(self, profile_id: str) -> dict[str, Any] | None:
        """Return a copy of the stored document."""
        with self._lock:
            doc = self._docs.get(profile_id)
            return dict(doc) if doc is not None else None

    def clear(self) -> None:
        with self._lock:
            self._docs.clear()
            self.update_calls.clear()
