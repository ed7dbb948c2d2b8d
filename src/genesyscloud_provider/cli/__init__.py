"""Command line interface for the Genesys Cloud resource provider."""
