"""Declarative table of tracked fields and the field-level diff built on it."""

from __future__ import annotations

import operator
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any, Final


@dataclass(slots=True)
class PropertyChange:
    """One differing tracked field, ready to be appended to history."""

    property_id: int
    field_name: str
    previous_value: str | None
    current_value: str


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


def serialize_value(value: Any) -> str:
    """Render a tracked value the way it is stored in history."""

    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, datetime):
        return _as_utc(value).isoformat()
    return str(value)


def _same_instant(left: datetime, right: datetime) -> bool:
    # Some stores hand back naive UTC timestamps.
    return _as_utc(left) == _as_utc(right)


@dataclass(frozen=True, slots=True)
class TrackedField:
    name: str
    serialize: Callable[[Any], str] = serialize_value
    equals: Callable[[Any, Any], bool] = operator.eq
    accessor: Callable[[Any], Any] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "accessor", operator.attrgetter(self.name))

    def value_of(self, record: object) -> Any:
        return self.accessor(record)

    def differs(self, previous: Any, current: Any) -> bool:
        if previous is None or current is None:
            return (previous is None) != (current is None)
        return not self.equals(previous, current)


TRACKED_FIELDS: Final[tuple[TrackedField, ...]] = (
    TrackedField("status"),
    TrackedField("list_price"),
    TrackedField("sold_price"),
    TrackedField("sold_date", equals=_same_instant),
    TrackedField("is_pending"),
    TrackedField("is_contingent"),
    TrackedField("is_new_listing"),
    TrackedField("is_foreclosure"),
    TrackedField("is_price_reduced"),
    TrackedField("is_coming_soon"),
)

TRACKED_FIELD_NAMES: Final[tuple[str, ...]] = tuple(f.name for f in TRACKED_FIELDS)


def diff_tracked_fields(tracked: Any, incoming: Any) -> list[PropertyChange]:
    """Compare a tracked property against a freshly normalized listing.

    Returns one :class:`PropertyChange` per differing field, in
    ``TRACKED_FIELDS`` order. An absent new value is recorded as ``""``
    while an absent previous value stays ``None``.
    """

    changes: list[PropertyChange] = []
    for tracked_field in TRACKED_FIELDS:
        previous = tracked_field.value_of(tracked)
        current = tracked_field.value_of(incoming)
        if not tracked_field.differs(previous, current):
            continue
        changes.append(
            PropertyChange(
                property_id=tracked.id,
                field_name=tracked_field.name,
                previous_value=(
                    tracked_field.serialize(previous) if previous is not None else None
                ),
                current_value=(
                    tracked_field.serialize(current) if current is not None else ""
                ),
            )
        )
    return changes


def initial_state_changes(property_id: int, incoming: Any) -> list[PropertyChange]:
    """History seed for a first sighting: one entry per present field."""

    changes: list[PropertyChange] = []
    for tracked_field in TRACKED_FIELDS:
        value = tracked_field.value_of(incoming)
        if value is None:
            continue
        changes.append(
            PropertyChange(
                property_id=property_id,
                field_name=tracked_field.name,
                previous_value=None,
                current_value=tracked_field.serialize(value),
            )
        )
    return changes
