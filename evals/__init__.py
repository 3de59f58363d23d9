"""
Evaluation Scripts for Retail Reports
=====================================
Invariant checks and quality scores for the written reports.
"""

from .eval_reports import run_evaluation as run_report_eval

__all__ = [
    'run_report_eval',
]
