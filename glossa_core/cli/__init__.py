"""Command line entry points for glossa."""
