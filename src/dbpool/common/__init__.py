"""Shared settings, logging and error types."""
