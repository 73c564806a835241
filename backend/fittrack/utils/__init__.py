"""Utilities module."""
