"""Utility functions for poz.

The ``logging_system`` module provides a configurable logging setup that
honours environment variables and renders through Rich on a terminal, with
a plain formatter for pipes and log files.
"""

from .logging_system import setup_log_system, get_logger  # noqa: F401

__all__ = ["setup_log_system", "get_logger"]
