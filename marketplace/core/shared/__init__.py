"""
Shared infrastructure utilities.
"""

from marketplace.core.shared.logger import configure_logging, request_id_var

__all__ = ["configure_logging", "request_id_var"]
