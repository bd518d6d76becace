"""Shapes handed over by the upstream scrape transport."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import StrEnum


class ScrapeErrorKind(StrEnum):
    NETWORK = "network"
    BLOCKED = "blocked"
    PARSE = "parse"


class ScrapeError(RuntimeError):
    """Page-level failure reported by the transport."""

    def __init__(self, kind: ScrapeErrorKind, message: str) -> None:
        super().__init__(f"{kind.value}: {message}")
        self.kind = kind
        self.message = message


@dataclass(slots=True)
class ScrapePage:
    """One fetched page: its URL and the raw listing payloads parsed from it."""

    page_url: str
    payloads: list[Mapping[str, object]] = field(default_factory=list)
    error: ScrapeError | None = None

    @property
    def is_usable(self) -> bool:
        return self.error is None
