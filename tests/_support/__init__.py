"""Test support helpers for pact-matrix tests."""
