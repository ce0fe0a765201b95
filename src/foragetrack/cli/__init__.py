"""Command-line interface for foragetrack."""
