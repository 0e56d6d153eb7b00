"""Shared utilities: structured logging, identifiers, metrics."""
