"""Scan, aggregate and commit pipeline."""
