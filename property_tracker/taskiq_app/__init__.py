"""Background ingestion worker."""
