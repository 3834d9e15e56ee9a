# ABOUTME: Folio - a library catalog with an ISBN/photo ingestion pipeline.
# ABOUTME: Exposes the package version.

__version__ = "0.1.0"
