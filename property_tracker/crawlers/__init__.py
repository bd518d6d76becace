"""Upstream scrape transport contracts."""

from property_tracker.crawlers.base import ScrapeError, ScrapeErrorKind, ScrapePage

__all__ = ["ScrapeError", "ScrapeErrorKind", "ScrapePage"]
