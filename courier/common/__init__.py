"""Shared helpers used across Courier subpackages."""
