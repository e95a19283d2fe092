"""Profile reader component: profile reads that survive legacy null emails."""

from .component import (
    DEFAULT_PAGE_SIZE,
    EmailFallbackReader,
    find_profiles_by_email,
    run_get_profile,
    run_list_all_profiles,
    run_list_profiles,
)
from .models import FULL, REDUCED, ProfileListResult, ProfileResult

__all__ = [
    "DEFAULT_PAGE_SIZE",
    "EmailFallbackReader",
    "find_profiles_by_email",
    "run_get_profile",
    "run_list_all_profiles",
    "run_list_profiles",
    "FULL",
    "REDUCED",
    "ProfileListResult",
    "ProfileResult",
]
