"""Shared test data: record types used across the suite."""
