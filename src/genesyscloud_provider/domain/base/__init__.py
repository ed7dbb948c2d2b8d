"""Shared domain kernel."""
