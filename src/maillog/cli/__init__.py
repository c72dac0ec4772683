"""Command line interface for maillog."""
