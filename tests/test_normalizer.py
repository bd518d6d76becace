"""Tests for raw payload normalization."""

import logging
from datetime import UTC, datetime, timedelta, timezone

import pytest

from property_tracker.domain.listing import (
    ListingValidationError,
    normalize_listing,
    normalize_page,
    parse_timestamp,
)


@pytest.mark.anyio
async def test_normalize_listing_flattens_nested_payload(make_payload) -> None:
    payload = make_payload(
        sold_date="2026-02-03T10:00:00Z",
        sold_price="489,000",
        flags={"is_pending": True, "is_price_reduced": False},
    )

    listing = normalize_listing(payload)

    assert listing.source_name == "realtor"
    assert listing.source_listing_id == "L-1001"
    assert listing.address_line == "123 Main St"
    assert listing.city == "Provo"
    assert listing.postal_code == "84601"
    assert listing.state_abbr == "UT"
    assert listing.county_name == "Utah"
    assert listing.status == "for_sale"
    assert listing.list_price == 500000
    assert listing.sold_price == 489000
    assert listing.sold_date == datetime(2026, 2, 3, 10, 0, tzinfo=UTC)
    assert listing.is_pending is True
    assert listing.is_price_reduced is False


@pytest.mark.anyio
async def test_normalize_listing_keeps_absent_values_absent(make_payload) -> None:
    payload = make_payload(status=None, list_price=None, county=None)

    listing = normalize_listing(payload)

    assert listing.status is None
    assert listing.list_price is None
    assert listing.county_name is None
    assert listing.is_pending is None
    assert listing.is_contingent is None
    assert listing.is_coming_soon is None
    assert listing.sold_date is None


@pytest.mark.anyio
async def test_normalize_listing_unparseable_date_is_absent(make_payload) -> None:
    listing = normalize_listing(make_payload(sold_date="sometime last spring"))

    assert listing.sold_date is None


@pytest.mark.anyio
async def test_normalize_listing_falls_back_to_top_level_fields(make_payload) -> None:
    payload = make_payload()
    payload["description"] = {}
    payload["sold_date"] = "2025-12-01"
    payload["is_price_reduced"] = "yes"

    listing = normalize_listing(payload)

    assert listing.sold_date == datetime(2025, 12, 1, tzinfo=UTC)
    assert listing.is_price_reduced is True


@pytest.mark.anyio
async def test_normalize_listing_defaults_missing_source_name(make_payload) -> None:
    payload = make_payload()
    payload["source"] = {"listing_id": "L-9"}

    assert normalize_listing(payload).source_name == "unknown"


@pytest.mark.anyio
@pytest.mark.parametrize(
    ("missing", "field_name"),
    [
        ("line", "address line"),
        ("city", "city"),
        ("postal_code", "postal code"),
    ],
)
async def test_normalize_listing_rejects_missing_address_parts(
    make_payload, missing: str, field_name: str
) -> None:
    payload = make_payload()
    payload["location"]["address"][missing] = "   "

    with pytest.raises(ListingValidationError) as exc_info:
        normalize_listing(payload)

    assert exc_info.value.field_name == field_name


@pytest.mark.anyio
async def test_normalize_listing_rejects_missing_listing_id(make_payload) -> None:
    payload = make_payload()
    payload["source"] = {"name": "realtor"}

    with pytest.raises(ListingValidationError, match="source listing id"):
        normalize_listing(payload)


@pytest.mark.anyio
async def test_normalize_listing_ignores_unusable_prices(make_payload) -> None:
    assert normalize_listing(make_payload(list_price="call for price")).list_price is None
    assert normalize_listing(make_payload(list_price=True)).list_price is None
    assert normalize_listing(make_payload(list_price="$ 415,500")).list_price == 415500
    assert normalize_listing(make_payload(list_price=float("nan"))).list_price is None


@pytest.mark.anyio
async def test_normalize_listing_drops_prices_outside_bigint_range(make_payload) -> None:
    assert normalize_listing(make_payload(list_price="99999999999999999999999")).list_price is None
    assert normalize_listing(make_payload(list_price=2**63)).list_price is None
    assert normalize_listing(make_payload(sold_price=-(2**63) - 1)).sold_price is None
    assert normalize_listing(make_payload(list_price=1e30)).list_price is None
    assert normalize_listing(make_payload(list_price="Infinity")).list_price is None
    assert normalize_listing(make_payload(list_price=2**63 - 1)).list_price == 2**63 - 1


@pytest.mark.anyio
async def test_normalize_page_skips_invalid_payloads(
    make_payload, caplog: pytest.LogCaptureFixture
) -> None:
    broken = make_payload(listing_id="L-2")
    broken["location"]["address"]["city"] = None
    payloads = [make_payload(listing_id="L-1"), broken, make_payload(listing_id="L-3")]

    with caplog.at_level(logging.WARNING):
        listings, rejected = normalize_page(payloads)

    assert [listing.source_listing_id for listing in listings] == ["L-1", "L-3"]
    assert rejected == 1
    assert "Skipping payload #1" in caplog.text


@pytest.mark.anyio
@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("2026-04-01T12:30:00Z", datetime(2026, 4, 1, 12, 30, tzinfo=UTC)),
        ("2026-04-01T14:30:00+02:00", datetime(2026, 4, 1, 12, 30, tzinfo=UTC)),
        ("2026-04-01", datetime(2026, 4, 1, tzinfo=UTC)),
        (1775046600, datetime(2026, 4, 1, 12, 30, tzinfo=UTC)),
        (1775046600000, datetime(2026, 4, 1, 12, 30, tzinfo=UTC)),
        ("", None),
        ("not a date", None),
        (None, None),
    ],
)
async def test_parse_timestamp(raw: object, expected: datetime | None) -> None:
    assert parse_timestamp(raw) == expected


@pytest.mark.anyio
@pytest.mark.parametrize(
    "raw",
    [
        "9999-12-31T23:00:00-05:00",
        "0001-01-01T00:00:00+05:00",
        datetime(9999, 12, 31, 23, 0, tzinfo=timezone(timedelta(hours=-5))),
    ],
)
async def test_parse_timestamp_out_of_range_after_offset_is_absent(raw: object) -> None:
    assert parse_timestamp(raw) is None


@pytest.mark.anyio
async def test_normalize_page_keeps_listing_with_out_of_range_date(make_payload) -> None:
    payloads = [
        make_payload(listing_id="L-1"),
        make_payload(listing_id="L-2", sold_date="9999-12-31T23:00:00-05:00"),
    ]

    listings, rejected = normalize_page(payloads)

    assert rejected == 0
    assert [listing.source_listing_id for listing in listings] == ["L-1", "L-2"]
    assert listings[1].sold_date is None
