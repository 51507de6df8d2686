"""Command-line interface for CoreHealth."""
