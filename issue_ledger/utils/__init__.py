"""Shared helpers: timestamps and logging setup."""
