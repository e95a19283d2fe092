"""EmailFallbackReader.

Broad profile reads ask for the full projection first. Legacy rows may hold
a null email, which the full projection declares non-nullable, so one bad row
fails the whole query. When, and only when, the error is that violation on
`email`, the identical read is retried with the reduced projection and the
result is tagged "reduced".
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import TypeVar

from src.core.errors import is_email_nullability_violation
from src.core.ports.store import Condition, ProfilePage, ProfileStorePort, Projection, equals
from src.domain.entities import Profile, Provenance

from .models import FULL, REDUCED, ProfileListResult, ProfileResult

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_PAGE_SIZE = 50


def _with_fallback(read: Callable[[Projection], T], what: str) -> tuple[T, Provenance]:
    try:
        return read(Projection.FULL), FULL
    except Exception as e:
        if not is_email_nullability_violation(e):
            raise
        logger.info("%s hit a null email; retrying with reduced projection", what)
    return read(Projection.REDUCED), REDUCED


def run_get_profile(store: ProfileStorePort, profile_id: str) -> ProfileResult:
    profile, provenance = _with_fallback(
        lambda projection: store.get(profile_id, projection),
        f"get {profile_id}",
    )
    return ProfileResult(profile=profile, provenance=provenance)


def run_list_profiles(
    store: ProfileStorePort,
    where: Condition | None = None,
    cursor: str | None = None,
    page_size: int = DEFAULT_PAGE_SIZE,
    mode: Provenance = FULL,
) -> ProfileListResult:
    """List one page of profiles.

    mode="reduced" skips the full-projection attempt entirely.
    """

    def read(projection: Projection) -> ProfilePage:
        return store.list_profiles(
            where=where,
            cursor=cursor,
            page_size=page_size,
            projection=projection,
        )

    if mode == REDUCED:
        page, provenance = read(Projection.REDUCED), REDUCED
    else:
        page, provenance = _with_fallback(read, "list_profiles")
    return ProfileListResult(items=page.items, cursor=page.cursor, provenance=provenance)


def _sort_key(profile: Profile) -> tuple[str, str]:
    label = profile.email or profile.owner or profile.id
    return (label.casefold(), profile.id)


def run_list_all_profiles(
    store: ProfileStorePort,
    where: Condition | None = None,
    page_size: int = DEFAULT_PAGE_SIZE,
) -> ProfileListResult:
    """Page through every matching profile.

    Once a page falls back to the reduced projection, the remaining pages are
    read reduced too. Items are sorted by (email or owner or id, id).
    """
    items: list[Profile] = []
    mode: Provenance = FULL
    cursor: str | None = None

    while True:
        page = run_list_profiles(store, where=where, cursor=cursor, page_size=page_size, mode=mode)
        items.extend(page.items)
        if page.reduced:
            mode = REDUCED
        cursor = page.cursor
        if not cursor:
            break

    items.sort(key=_sort_key)
    return ProfileListResult(items=items, cursor=None, provenance=mode)


def find_profiles_by_email(
    store: ProfileStorePort,
    email: str,
    page_size: int = DEFAULT_PAGE_SIZE,
) -> ProfileListResult:
    return run_list_all_profiles(store, where=equals("email", email.strip()), page_size=page_size)


class EmailFallbackReader:
    """Profile reads with the reduced-projection fallback."""

    def __init__(self, store: ProfileStorePort, page_size: int = DEFAULT_PAGE_SIZE):
        self.store = store
        self.page_size = page_size

    def get(self, profile_id: str) -> ProfileResult:
        return run_get_profile(self.store, profile_id)

    def list(
        self,
        where: Condition | None = None,
        cursor: str | None = None,
        mode: Provenance = FULL,
    ) -> ProfileListResult:
        return run_list_profiles(self.store, where, cursor, self.page_size, mode)

    def list_all(self, where: Condition | None = None) -> ProfileListResult:
        return run_list_all_profiles(self.store, where, self.page_size)

    def find_by_email(self, email: str) -> ProfileListResult:
        return find_profiles_by_email(self.store, email, self.page_size)
