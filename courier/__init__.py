"""Courier: paged resource retrieval and change-notification distribution."""
