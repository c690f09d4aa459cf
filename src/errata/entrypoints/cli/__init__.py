"""The `errata` command-line interface."""
