"""Reporting and aggregation over time entries."""
