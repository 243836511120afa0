"""Command line interface for recblock."""
