"""Change-tracking ingestion pipeline for re-scraped real-estate listings."""
