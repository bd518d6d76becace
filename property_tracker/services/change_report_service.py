"""Change event reports built from the property history log."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime, timedelta

from sqlalchemy.ext.asyncio import AsyncSession

from property_tracker.config import Settings, get_settings
from property_tracker.db.repositories import (
    ChangeEventRow,
    fetch_change_events,
    fetch_change_years,
)
from property_tracker.domain.status import derive_canonical_status

STATUS_CHANGE = "Status Change"
PRICE_CHANGE = "Price Change"


@dataclass(slots=True)
class ChangeViewModel:
    """One reportable change event with the property's current context."""

    change_date: datetime
    change_type: str
    field_name: str
    previous_value: str
    current_value: str

    address_full: str
    address_line: str
    city: str
    state_abbr: str | None
    postal_code: str
    county_name: str | None

    price: int | None
    canonical_status: str

    is_ready_to_build: bool
    is_new_listing: bool
    is_price_reduced: bool
    is_foreclosure: bool

    price_reduction: int | None

    def as_dict(self) -> dict[str, object]:
        return {
            "change_date": self.change_date.strftime("%Y-%m-%d"),
            "change_time": self.change_date.strftime("%H:%M:%S"),
            "change_type": self.change_type,
            "previous_value": self.previous_value,
            "current_value": self.current_value,
            "address_full": self.address_full,
            "address_line": self.address_line,
            "city": self.city,
            "state_abbr": self.state_abbr,
            "postal_code": self.postal_code,
            "county_name": self.county_name,
            "price": self.price,
            "price_reduction": self.price_reduction,
            "canonical_status": self.canonical_status,
            "is_new_listing": self.is_new_listing,
            "is_price_reduced": self.is_price_reduced,
            "is_foreclosure": self.is_foreclosure,
            "is_ready_to_build": self.is_ready_to_build,
        }


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


def _parse_int(value: str | None) -> int | None:
    if value is None:
        return None
    try:
        return int(value)
    except ValueError:
        return None


def build_change_view_model(row: ChangeEventRow) -> ChangeViewModel:
    """Turn a joined history row into a report row.

    Status events are shown as canonical statuses. The previous one is
    re-derived from the stored raw status with every flag assumed false, since
    flag values are not replayed from history.
    """

    history = row.history
    tracked = row.tracked

    current_status = derive_canonical_status(
        tracked.sold_date,
        bool(tracked.is_pending),
        bool(tracked.is_contingent),
        bool(tracked.is_coming_soon),
        tracked.status,
    )

    price_reduction: int | None = None
    if history.field_name == "status":
        change_type = STATUS_CHANGE
        previous_value = str(
            derive_canonical_status(
                tracked.sold_date, False, False, False, history.previous_value
            )
        )
        current_value = str(current_status)
    else:
        change_type = PRICE_CHANGE
        previous_value = history.previous_value or ""
        current_value = history.current_value
        previous_price = _parse_int(previous_value)
        current_price = _parse_int(current_value)
        if previous_price is not None and current_price is not None:
            price_reduction = previous_price - current_price

    address_full = (
        f"{tracked.address_line}, {tracked.city}, "
        f"{tracked.state_abbr or ''} {tracked.postal_code}"
    )

    return ChangeViewModel(
        change_date=_as_utc(history.observed_at),
        change_type=change_type,
        field_name=history.field_name,
        previous_value=previous_value,
        current_value=current_value,
        address_full=address_full,
        address_line=tracked.address_line,
        city=tracked.city,
        state_abbr=tracked.state_abbr,
        postal_code=tracked.postal_code,
        county_name=tracked.county_name,
        price=tracked.list_price,
        canonical_status=str(current_status),
        is_ready_to_build=tracked.status == "ready_to_build",
        is_new_listing=bool(tracked.is_new_listing),
        is_price_reduced=bool(tracked.is_price_reduced),
        is_foreclosure=bool(tracked.is_foreclosure),
        price_reduction=price_reduction,
    )


class ChangeReportService:
    """Read-only change event queries for exports and dashboards."""

    def __init__(self, session: AsyncSession, settings: Settings | None = None) -> None:
        self._session = session
        self._settings = settings or get_settings()

    async def get_change_events(
        self,
        *,
        state_abbr: str,
        year: int,
        county_name: str | None = None,
        since: datetime | None = None,
        limit: int | None = None,
    ) -> list[ChangeViewModel]:
        """Status and list price changes for a region and year, newest first."""

        rows = await fetch_change_events(
            self._session,
            state_abbr=state_abbr,
            year=year,
            county_name=county_name,
            since=since,
            limit=limit,
        )
        return [build_change_view_model(row) for row in rows]

    async def get_recent_changes(
        self,
        *,
        state_abbr: str | None = None,
        days: int | None = None,
        limit: int | None = None,
        now: datetime | None = None,
    ) -> list[ChangeViewModel]:
        """Current-year changes from the last ``days`` days, newest first."""

        current = (now or datetime.now(UTC)).astimezone(UTC)
        window_days = days if days is not None else self._settings.recent_changes_days
        return await self.get_change_events(
            state_abbr=state_abbr or self._settings.default_report_state,
            year=current.year,
            since=current - timedelta(days=window_days),
            limit=limit if limit is not None else self._settings.recent_changes_limit,
        )

    async def get_change_years(self) -> list[int]:
        """Distinct years with recorded history, newest first."""

        return await fetch_change_years(self._session)
