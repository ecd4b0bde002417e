"""
Core utilities for pdfshare.

This package provides the framework-independent building blocks: logging
configuration, domain errors, persistence, security helpers, and the cache,
storage and e-mail adapters.
"""

from pdfshare.core.logging_config import get_logger, setup_logging

__all__ = ["get_logger", "setup_logging"]
