"""Utility modules for the universal translator.

This package provides logging setup and string helpers (normalization, fingerprints, word splitting).
"""

from utils.logger_utils import LoggerUtils
from utils.string_utils import StringUtils

__all__: list[str] = ["LoggerUtils", "StringUtils"]
