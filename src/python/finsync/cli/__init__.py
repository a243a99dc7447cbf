"""Command line interface for finsync."""
