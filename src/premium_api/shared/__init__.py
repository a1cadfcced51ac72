"""Shared helpers used across the client package."""
