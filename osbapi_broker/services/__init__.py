"""Catalog lookup, domain service interfaces and event flows."""
