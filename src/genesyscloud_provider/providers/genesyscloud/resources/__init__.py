"""Genesys Cloud resource types."""
