"""Unit tests.

One module at a time. The catalog source, clock and store are replaced by the
fakes in `tests.unit.fakes`; HTTP goes through `httpx.MockTransport`. Nothing
here opens a socket or a database file.
"""
