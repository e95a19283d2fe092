"""Profile admin component: email backfill, email probe and admin detection."""

from .component import (
    PLACEHOLDER_PREFIX,
    is_admin,
    is_placeholder_email,
    placeholder_email,
    run_backfill_missing_emails,
    run_probe_missing_emails,
)
from .models import DEFAULT_PLACEHOLDER_DOMAIN, BackfillOutput, ProbeFailure, ProbeOutput

__all__ = [
    "PLACEHOLDER_PREFIX",
    "is_admin",
    "is_placeholder_email",
    "placeholder_email",
    "run_backfill_missing_emails",
    "run_probe_missing_emails",
    "DEFAULT_PLACEHOLDER_DOMAIN",
    "BackfillOutput",
    "ProbeFailure",
    "ProbeOutput",
]
