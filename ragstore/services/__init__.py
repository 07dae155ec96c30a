"""
Services module for the File Search store client.
"""

from .logging_service import setup_logging, get_logger

__all__ = ["setup_logging", "get_logger"]
