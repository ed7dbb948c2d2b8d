"""Genesys Cloud provider - API client, client pool and resources."""
