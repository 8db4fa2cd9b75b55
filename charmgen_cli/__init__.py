"""Command line interface for charmgen."""
