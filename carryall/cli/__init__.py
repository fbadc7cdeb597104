"""Command-line interface for carryall."""
