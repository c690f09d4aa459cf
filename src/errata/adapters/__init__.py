"""Adapters (infrastructure) for ERRATA.

Provide concrete implementations of the application ports (key-value stores,
catalog sources, clocks), plus persistence mapping and related wiring (engines,
metadata, migrations).

Dependency rule: may import `errata.domain` and `errata.interfaces`; the domain
must not import this package.
"""
