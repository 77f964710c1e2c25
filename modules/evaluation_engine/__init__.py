"""
Evaluation Engine Module
========================

Responsibility:
- Multiclass classification metrics (accuracy, log-loss, per-class scores, confusion counts).
- Persistence of evaluation reports.
"""

from .evaluation_engine import (
    EvaluationEngine,
    MulticlassMetrics,
    compute_multiclass_metrics,
    empty_multiclass_metrics,
)

__all__ = ['EvaluationEngine', 'MulticlassMetrics', 'compute_multiclass_metrics', 'empty_multiclass_metrics']
