"""
Utility helpers.
"""

from .search import find_first_index, find_last, find_last_index

__all__ = ["find_first_index", "find_last", "find_last_index"]
