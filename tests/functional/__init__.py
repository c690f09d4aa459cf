"""Functional tests.

Drive the `errata` command line through Click's `CliRunner` and check only
what a user sees: exit codes, stdout/stderr text, files left behind. Catalog
commands run against a fake source wired in by the `wired` fixture.
"""
