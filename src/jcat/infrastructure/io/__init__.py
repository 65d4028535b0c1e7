"""Filesystem discovery and codec helpers."""
