"""Shared helpers used by all tools."""
