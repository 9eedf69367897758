"""Integration tests against the in-memory ledger."""
