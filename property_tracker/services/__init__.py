"""Service layer for ingestion, identity resolution, and reporting."""
