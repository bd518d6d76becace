"""Canonical lifecycle status derivation."""

from datetime import datetime
from enum import StrEnum
from typing import Final


class CanonicalStatus(StrEnum):
    SOLD = "Sold"
    PENDING = "Pending"
    CONTINGENT = "Contingent"
    COMING_SOON = "Coming Soon"
    ACTIVE = "Active"
    OTHER = "Other"


ACTIVE_RAW_STATUSES: Final = frozenset({"for_sale", "ready_to_build", "for_rent"})


def derive_canonical_status(
    sold_date: datetime | None,
    is_pending: bool,
    is_contingent: bool,
    is_coming_soon: bool,
    raw_status: str | None,
) -> CanonicalStatus:
    """Map flags and the raw source status to one lifecycle label.

    Checks run top to bottom and the first match wins, so a listing that is
    both pending and contingent reports as Pending.
    """

    if sold_date is not None:
        return CanonicalStatus.SOLD
    if is_pending:
        return CanonicalStatus.PENDING
    if is_contingent:
        return CanonicalStatus.CONTINGENT
    if is_coming_soon:
        return CanonicalStatus.COMING_SOON
    if raw_status in ACTIVE_RAW_STATUSES:
        return CanonicalStatus.ACTIVE
    return CanonicalStatus.OTHER
