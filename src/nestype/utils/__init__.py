"""
nestype utilities package
"""

from .base import Result, ResultTag

__all__ = ["Result", "ResultTag"]
