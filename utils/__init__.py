"""Utility modules for TransRouter.

This package provides utility functions for logging, string manipulation and request signing.
"""

from utils.crypto_utils import CryptoUtils
from utils.logger_utils import LoggerUtils
from utils.string_utils import StringUtils

__all__: list[str] = ["CryptoUtils", "LoggerUtils", "StringUtils"]
