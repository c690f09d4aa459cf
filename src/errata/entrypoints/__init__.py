"""Entrypoints (inbound adapters) for ERRATA.

Expose the application to the outside world: currently the `errata` CLI.
Parse and validate inputs, call the service layer through the bootstrap
container, and present results.

Dependency rule: may import `errata.bootstrap` and `errata.service_layer`;
avoid importing `errata.adapters` directly.
"""
