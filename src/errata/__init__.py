"""ERRATA

Error-catalog cache and resolution service for the onboarding client.
Maps backend error codes and keys to localized, human-readable messages,
caching the catalog in memory and in a durable local store.
"""

__all__ = ["__version__"]
__version__ = "0.1.0"
