"""Logging setup for the blog service."""

from __future__ import annotations

from digiblog.observability.logging import CorrelationIdFilter, configure_logging

__all__ = ["CorrelationIdFilter", "configure_logging"]
