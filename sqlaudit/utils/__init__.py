"""Shared utilities for sqlaudit."""

from .error_handler import handle_exceptions
from .exit_codes import ExitCodes

__all__ = ["ExitCodes", "handle_exceptions"]
