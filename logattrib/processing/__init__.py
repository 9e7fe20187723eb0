"""
Cooperative processing of long scans.
"""

from .work_units import WorkBudget, run_cooperatively, run_to_completion

__all__ = ["WorkBudget", "run_cooperatively", "run_to_completion"]
