"""
Core module initialization
"""

from .config import config
from .errors import ErrorResponse, ErrorResponseModel
from .logger import logger
from .results import Outcome, Result

__all__ = [
    "config",
    "ErrorResponse",
    "ErrorResponseModel",
    "logger",
    "Outcome",
    "Result",
]
