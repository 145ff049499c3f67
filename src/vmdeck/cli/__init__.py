"""Command line interface for vmdeck."""
