"""Marketing site blog service with an offline-first client cache."""

__version__ = "1.0.0"
