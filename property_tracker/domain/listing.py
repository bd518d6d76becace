"""Normalization of raw scrape payloads into canonical listing records."""

from __future__ import annotations

import logging
import math
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from datetime import UTC, date, datetime
from decimal import Decimal
from typing import Final

from property_tracker.domain.address import build_address_key

logger = logging.getLogger(__name__)

_TRUE_STRINGS: Final = frozenset({"true", "yes", "y", "1"})
_FALSE_STRINGS: Final = frozenset({"false", "no", "n", "0"})
# Epoch values above this are treated as milliseconds.
_EPOCH_MILLIS_THRESHOLD: Final = 100_000_000_000
# Prices are stored in signed 64-bit columns.
_BIGINT_MIN: Final = -(2**63)
_BIGINT_MAX: Final = 2**63 - 1


class ListingValidationError(ValueError):
    """Raised when a payload lacks a field required to identify the listing."""

    def __init__(self, field_name: str) -> None:
        super().__init__(f"Missing or empty {field_name}")
        self.field_name = field_name


@dataclass(slots=True)
class NormalizedListing:
    """Flattened, validated listing ready for identity lookup and diffing."""

    source_name: str
    source_listing_id: str
    address_line: str
    city: str
    postal_code: str
    state_abbr: str | None = None
    county_name: str | None = None

    status: str | None = None
    list_price: int | None = None
    sold_price: int | None = None
    sold_date: datetime | None = None
    is_pending: bool | None = None
    is_contingent: bool | None = None
    is_new_listing: bool | None = None
    is_foreclosure: bool | None = None
    is_price_reduced: bool | None = None
    is_coming_soon: bool | None = None

    def __post_init__(self) -> None:
        for field_name in ("address_line", "city", "postal_code", "source_listing_id"):
            value = getattr(self, field_name)
            if not isinstance(value, str) or not value.strip():
                raise ListingValidationError(field_name.replace("_", " "))

    @property
    def address_key(self) -> str:
        return build_address_key(self.address_line, self.city, self.postal_code)


def _as_mapping(value: object) -> Mapping[str, object]:
    if isinstance(value, Mapping):
        return {str(key): item for key, item in value.items()}
    return {}


def _to_optional_str(value: object | None) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _to_optional_int(value: object | None) -> int | None:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, float) and not math.isfinite(value):
        return None

    if isinstance(value, (int, float, Decimal)):
        number = value
    else:
        cleaned = str(value).replace(",", "").replace(" ", "").replace("$", "")
        if cleaned == "":
            return None
        try:
            number = Decimal(cleaned)
        except ArithmeticError:
            return None

    try:
        if not _BIGINT_MIN <= number <= _BIGINT_MAX:
            return None
        return int(number)
    except (ArithmeticError, ValueError):
        return None


def _to_optional_bool(value: object | None) -> bool | None:
    if value is None:
        return None
    if isinstance(value, bool):
        return value
    if isinstance(value, int):
        return value != 0 if value in (0, 1) else None

    text = str(value).strip().lower()
    if text in _TRUE_STRINGS:
        return True
    if text in _FALSE_STRINGS:
        return False
    return None


def parse_timestamp(value: object | None) -> datetime | None:
    """Parse a flexible timestamp into an aware UTC datetime.

    Accepts datetimes, dates, ISO-8601 / RFC 3339 strings (``Z`` suffix or
    offset), date-only strings and epoch seconds or milliseconds. Anything
    else yields ``None``.
    """

    if value is None or isinstance(value, bool):
        return None

    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime(value.year, value.month, value.day)
    elif isinstance(value, (int, float)):
        seconds = float(value)
        if abs(seconds) > _EPOCH_MILLIS_THRESHOLD:
            seconds /= 1000
        try:
            return datetime.fromtimestamp(seconds, tz=UTC)
        except (OverflowError, OSError, ValueError):
            return None
    else:
        text = str(value).strip()
        if not text:
            return None
        if text.endswith(("Z", "z")):
            text = f"{text[:-1]}+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            return None

    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=UTC)
    try:
        return parsed.astimezone(UTC)
    except (OverflowError, ValueError):
        # Offsets can push dates at the edge of the calendar out of range.
        return None


def normalize_listing(payload: Mapping[str, object]) -> NormalizedListing:
    """Convert one raw scrape payload into a :class:`NormalizedListing`.

    Raises :class:`ListingValidationError` naming the first missing required
    field (address line, city, postal code, source listing id).
    """

    raw = _as_mapping(payload)
    source = _as_mapping(raw.get("source"))
    location = _as_mapping(raw.get("location"))
    address = _as_mapping(location.get("address"))
    county = _as_mapping(location.get("county"))
    description = _as_mapping(raw.get("description"))
    flags = _as_mapping(raw.get("flags"))

    address_line = _to_optional_str(address.get("line"))
    if address_line is None:
        raise ListingValidationError("address line")
    city = _to_optional_str(address.get("city"))
    if city is None:
        raise ListingValidationError("city")
    postal_code = _to_optional_str(address.get("postal_code"))
    if postal_code is None:
        raise ListingValidationError("postal code")
    source_listing_id = _to_optional_str(source.get("listing_id"))
    if source_listing_id is None:
        raise ListingValidationError("source listing id")

    sold_date_raw = description.get("sold_date")
    if sold_date_raw is None:
        sold_date_raw = raw.get("sold_date")
    is_price_reduced = _to_optional_bool(flags.get("is_price_reduced"))
    if is_price_reduced is None:
        is_price_reduced = _to_optional_bool(raw.get("is_price_reduced"))

    return NormalizedListing(
        source_name=_to_optional_str(source.get("name")) or "unknown",
        source_listing_id=source_listing_id,
        address_line=address_line,
        city=city,
        postal_code=postal_code,
        state_abbr=_to_optional_str(address.get("state_code")),
        county_name=_to_optional_str(county.get("name")),
        status=_to_optional_str(raw.get("status")),
        list_price=_to_optional_int(raw.get("list_price")),
        sold_price=_to_optional_int(raw.get("sold_price")),
        sold_date=parse_timestamp(sold_date_raw),
        is_pending=_to_optional_bool(flags.get("is_pending")),
        is_contingent=_to_optional_bool(flags.get("is_contingent")),
        is_new_listing=_to_optional_bool(flags.get("is_new_listing")),
        is_foreclosure=_to_optional_bool(flags.get("is_foreclosure")),
        is_price_reduced=is_price_reduced,
        is_coming_soon=_to_optional_bool(flags.get("is_coming_soon")),
    )


def normalize_page(
    payloads: Iterable[Mapping[str, object]],
) -> tuple[list[NormalizedListing], int]:
    """Normalize a page of payloads, skipping invalid ones.

    Returns the valid listings and the number of rejected payloads.
    """

    listings: list[NormalizedListing] = []
    rejected = 0
    for index, payload in enumerate(payloads):
        try:
            listings.append(normalize_listing(payload))
        except ListingValidationError as exc:
            rejected += 1
            logger.warning("Skipping payload #%s due to validation error: %s", index, exc)
    return listings, rejected
