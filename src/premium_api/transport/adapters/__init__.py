"""Concrete transport backends, one per tier."""
