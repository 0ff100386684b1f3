"""Request throttling for the public API."""

from .rate_limit import limiter  # noqa: F401

__all__ = ["limiter"]
