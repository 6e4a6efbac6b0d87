"""Thin per-provider HTTP fetchers returning raw JSON."""
