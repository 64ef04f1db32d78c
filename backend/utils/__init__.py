"""
Utility functions
"""
from backend.utils.logger import setup_logger, get_logger
from backend.utils.validators import sanitize_input

__all__ = [
    "setup_logger",
    "get_logger",
    "sanitize_input",
]
