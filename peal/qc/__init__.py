"""
Quality Control module for evaluating rendered sounds and edits.
"""
from peal.qc.qc import analyze, max_step, splice_steps
from peal.qc.thresholds import QC_THRESHOLDS

__all__ = ["analyze", "max_step", "splice_steps", "QC_THRESHOLDS"]
