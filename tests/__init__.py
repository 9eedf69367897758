"""Copain test suite."""
