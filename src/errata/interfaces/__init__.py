"""Interfaces (application boundary) for ERRATA.

Defines framework-free application contracts: ABCs and the error types raised
through them (durable key-value store, catalog source, clock). Business rules
stay out of this package.

Dependency rule: this package may import `errata.domain` only. It may be
imported by `errata.service_layer`, `errata.adapters`, and `errata.bootstrap`.
"""
