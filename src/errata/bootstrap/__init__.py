"""Bootstrap (composition root) for ERRATA.

Assembles the application at runtime: wires concrete adapters (catalog source,
durable key-value store, clock) into the catalog cache and resolver, reads
configuration, and exposes the resulting container to entrypoints.

Import rules:
- Entry points import *this* package (not adapters/service_layer/interfaces/domain).
- This package may import: `errata.adapters`, `errata.service_layer`,
  `errata.interfaces`, `errata.domain`, and `errata.config`.
- Inner layers must not import `errata.bootstrap`.

Public surface:
- Re-export composition factories from this module; keep wiring helpers internal.
- No business rules live here; this is assembly and lifecycle only.
"""

from .bootstrap import AppContainer, SourceKind, bootstrap

__all__ = ["AppContainer", "SourceKind", "bootstrap"]
