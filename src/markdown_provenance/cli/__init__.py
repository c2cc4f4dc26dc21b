"""Command-line interface for markdown-provenance."""
