"""Shared utilities: I/O, merging, text and time helpers."""
