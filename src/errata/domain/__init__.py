"""Domain layer for ERRATA.

Contains the catalog value objects and the rules for which entries are
indexable. This package is deliberately technology-agnostic.

Dependency rule: do not import from `errata.adapters` or `errata.entrypoints`.
"""
