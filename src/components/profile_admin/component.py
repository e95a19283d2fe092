"""Profile admin operations.

Repairs for legacy profiles whose email is absent or null:
- backfill writes a recognisable placeholder email, only where none exists
- probe reads every profile individually to find the rows that break
  full-projection reads
"""

from __future__ import annotations

import logging
import re

from src.components.profile.models import DEFAULT_IDENTITY_CONFIG, IdentityConfig
from src.components.profile_reader import DEFAULT_PAGE_SIZE, run_list_all_profiles
from src.core.errors import error_to_message, is_condition_failure, is_email_nullability_violation
from src.core.ports.store import (
    ProfileStorePort,
    attribute_is_null_type,
    attribute_not_exists,
)
from src.domain.entities import IdentityAttributes, SessionClaims

from .models import DEFAULT_PLACEHOLDER_DOMAIN, BackfillOutput, ProbeFailure, ProbeOutput

logger = logging.getLogger(__name__)

PLACEHOLDER_PREFIX = "missing+"
_UNSAFE_CHARS = re.compile(r"[^a-zA-Z0-9._-]")


def placeholder_email(profile_id: str, domain: str = DEFAULT_PLACEHOLDER_DOMAIN) -> str:
    """missing+<sanitised id>@<domain>."""
    safe = _UNSAFE_CHARS.sub("-", profile_id)
    return f"{PLACEHOLDER_PREFIX}{safe}@{domain}"


def is_placeholder_email(email: str | None, domain: str = DEFAULT_PLACEHOLDER_DOMAIN) -> bool:
    if not email:
        return False
    value = email.strip().lower()
    return value.startswith(PLACEHOLDER_PREFIX) and value.endswith(f"@{domain.lower()}")


def is_admin(
    attributes: IdentityAttributes,
    claims: SessionClaims,
    config: IdentityConfig = DEFAULT_IDENTITY_CONFIG,
) -> bool:
    """Admin by attribute role or by session group/role."""
    if (attributes.role or "").strip() == config.admin_role:
        return True
    return config.admin_group in claims.groups or claims.role == config.admin_role


def run_backfill_missing_emails(
    store: ProfileStorePort,
    domain: str = DEFAULT_PLACEHOLDER_DOMAIN,
    page_size: int = DEFAULT_PAGE_SIZE,
) -> BackfillOutput:
    """Give every email-less profile a placeholder email.

    Each write is guarded so an email set in the meantime is never overwritten;
    those count as skipped. Other failures are logged and counted.
    """
    listing = run_list_all_profiles(store, page_size=page_size)
    guard = attribute_not_exists("email") | attribute_is_null_type("email")

    updated = skipped = failed = 0
    for profile in listing.items:
        try:
            store.update(
                profile.id,
                {"email": placeholder_email(profile.id, domain)},
                condition=guard,
            )
        except Exception as e:
            if is_condition_failure(e):
                skipped += 1
                continue
            failed += 1
            logger.warning("Email backfill failed for %s: %s", profile.id, error_to_message(e))
            continue
        updated += 1

    logger.info(
        "Email backfill: updated=%d skipped=%d failed=%d", updated, skipped, failed
    )
    return BackfillOutput(
        updated=updated,
        skipped=skipped,
        failed=failed,
        provenance=listing.provenance,
    )


def run_probe_missing_emails(
    store: ProfileStorePort,
    page_size: int = DEFAULT_PAGE_SIZE,
    domain: str = DEFAULT_PLACEHOLDER_DOMAIN,
) -> ProbeOutput:
    """Read each profile with the full projection and report which lack an email.

    A backfilled placeholder address counts as missing.
    """
    listing = run_list_all_profiles(store, page_size=page_size)

    ok = 0
    missing: list[str] = []
    failed: list[ProbeFailure] = []
    for item in listing.items:
        try:
            profile = store.get(item.id)
        except Exception as e:
            if is_email_nullability_violation(e):
                missing.append(item.id)
            else:
                failed.append(ProbeFailure(profile_id=item.id, message=error_to_message(e)))
            continue

        email = (profile.email or "").strip() if profile else ""
        if not email or is_placeholder_email(email, domain):
            missing.append(item.id)
        else:
            ok += 1

    return ProbeOutput(ok=ok, missing=tuple(missing), failed=tuple(failed))
