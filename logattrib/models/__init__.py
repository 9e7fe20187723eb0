"""
Ordered timelines and time range algebra.
"""

from .segmentation import Segmentation, TSRange
from .timeline import Timeline, check_sorted

__all__ = ["Segmentation", "TSRange", "Timeline", "check_sorted"]
