"""Pure domain logic: normalization, status rules, and field diffing."""

from property_tracker.domain.listing import (
    ListingValidationError,
    NormalizedListing,
    normalize_listing,
    normalize_page,
)
from property_tracker.domain.status import CanonicalStatus, derive_canonical_status
from property_tracker.domain.tracked_fields import (
    TRACKED_FIELDS,
    PropertyChange,
    diff_tracked_fields,
    initial_state_changes,
)

__all__ = [
    "CanonicalStatus",
    "ListingValidationError",
    "NormalizedListing",
    "PropertyChange",
    "TRACKED_FIELDS",
    "derive_canonical_status",
    "diff_tracked_fields",
    "initial_state_changes",
    "normalize_listing",
    "normalize_page",
]
