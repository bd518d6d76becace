"""Tests for the field-level diff over tracked fields."""

from datetime import UTC, datetime

import pytest

from property_tracker.domain.listing import NormalizedListing
from property_tracker.domain.tracked_fields import (
    TRACKED_FIELD_NAMES,
    diff_tracked_fields,
    initial_state_changes,
    serialize_value,
)
from property_tracker.models import TrackedProperty


def _tracked(**values: object) -> TrackedProperty:
    defaults: dict[str, object] = {
        "id": 1,
        "address_line": "123 Main",
        "city": "Anytown",
        "postal_code": "12345",
        "address_key": "123 MAIN|ANYTOWN|12345",
        "status": "for_sale",
        "list_price": 500000,
        "sold_price": None,
        "sold_date": None,
        "is_pending": False,
        "is_contingent": True,
        "is_new_listing": True,
        "is_foreclosure": False,
        "is_price_reduced": False,
        "is_coming_soon": False,
    }
    defaults.update(values)
    return TrackedProperty(**defaults)


def _listing(**values: object) -> NormalizedListing:
    defaults: dict[str, object] = {
        "source_name": "test",
        "source_listing_id": "123",
        "address_line": "123 Main",
        "city": "Anytown",
        "postal_code": "12345",
        "state_abbr": "CA",
        "status": "for_sale",
        "list_price": 500000,
        "is_pending": False,
        "is_contingent": True,
        "is_new_listing": True,
        "is_foreclosure": False,
        "is_price_reduced": False,
        "is_coming_soon": False,
    }
    defaults.update(values)
    return NormalizedListing(**defaults)


@pytest.mark.anyio
async def test_tracked_field_order_is_fixed() -> None:
    assert TRACKED_FIELD_NAMES == (
        "status",
        "list_price",
        "sold_price",
        "sold_date",
        "is_pending",
        "is_contingent",
        "is_new_listing",
        "is_foreclosure",
        "is_price_reduced",
        "is_coming_soon",
    )


@pytest.mark.anyio
async def test_diff_of_identical_state_is_empty() -> None:
    assert diff_tracked_fields(_tracked(), _listing()) == []


@pytest.mark.anyio
async def test_diff_single_price_drop() -> None:
    changes = diff_tracked_fields(_tracked(), _listing(list_price=495000))

    assert len(changes) == 1
    change = changes[0]
    assert change.property_id == 1
    assert change.field_name == "list_price"
    assert change.previous_value == "500000"
    assert change.current_value == "495000"


@pytest.mark.anyio
async def test_diff_distinguishes_false_from_absent() -> None:
    changes = diff_tracked_fields(_tracked(is_contingent=False), _listing(is_contingent=None))

    assert [(c.field_name, c.previous_value, c.current_value) for c in changes] == [
        ("is_contingent", "false", "")
    ]


@pytest.mark.anyio
async def test_diff_newly_present_value_has_no_previous() -> None:
    changes = diff_tracked_fields(_tracked(sold_price=None), _listing(sold_price=480000))

    assert [(c.field_name, c.previous_value, c.current_value) for c in changes] == [
        ("sold_price", None, "480000")
    ]


@pytest.mark.anyio
async def test_diff_reports_every_changed_field_in_order() -> None:
    sold_at = datetime(2023, 10, 1, tzinfo=UTC)
    after = _listing(
        status="contingent",
        list_price=495000,
        sold_date=sold_at,
        is_pending=True,
        is_contingent=None,
        is_new_listing=False,
        is_foreclosure=True,
        is_price_reduced=True,
        is_coming_soon=True,
    )

    changes = diff_tracked_fields(_tracked(), after)

    assert len(changes) == 9
    assert [c.field_name for c in changes] == [
        "status",
        "list_price",
        "sold_date",
        "is_pending",
        "is_contingent",
        "is_new_listing",
        "is_foreclosure",
        "is_price_reduced",
        "is_coming_soon",
    ]
    by_name = {c.field_name: c for c in changes}
    assert by_name["status"].previous_value == "for_sale"
    assert by_name["status"].current_value == "contingent"
    assert by_name["sold_date"].previous_value is None
    assert by_name["sold_date"].current_value == "2023-10-01T00:00:00+00:00"
    assert by_name["is_pending"].previous_value == "false"
    assert by_name["is_pending"].current_value == "true"
    assert by_name["is_contingent"].previous_value == "true"
    assert by_name["is_contingent"].current_value == ""


@pytest.mark.anyio
async def test_diff_treats_naive_stored_timestamp_as_utc() -> None:
    tracked = _tracked(sold_date=datetime(2026, 3, 1, 8, 0))
    listing = _listing(sold_date=datetime(2026, 3, 1, 8, 0, tzinfo=UTC))

    assert diff_tracked_fields(tracked, listing) == []


@pytest.mark.anyio
async def test_initial_state_changes_cover_present_fields_only() -> None:
    listing = _listing(
        list_price=None,
        is_contingent=None,
        is_new_listing=None,
        is_foreclosure=None,
        is_price_reduced=None,
        is_coming_soon=None,
        is_pending=True,
        sold_price=410000,
    )

    changes = initial_state_changes(42, listing)

    assert [(c.field_name, c.current_value) for c in changes] == [
        ("status", "for_sale"),
        ("sold_price", "410000"),
        ("is_pending", "true"),
    ]
    assert all(c.previous_value is None for c in changes)
    assert all(c.property_id == 42 for c in changes)


@pytest.mark.anyio
async def test_serialize_value() -> None:
    assert serialize_value(True) == "true"
    assert serialize_value(False) == "false"
    assert serialize_value(1250000) == "1250000"
    assert serialize_value(datetime(2026, 5, 1, 9, 30)) == "2026-05-01T09:30:00+00:00"
