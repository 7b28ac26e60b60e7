"""Catalog services: search, scanning, statistics and the SQL repository."""
