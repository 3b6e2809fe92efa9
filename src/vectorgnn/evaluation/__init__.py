"""
Evaluation subsystem for vectorgnn.

Provides metrics to evaluate:
- reconstruction error per compression tier
- concentration of attention and search distributions
"""

from vectorgnn.evaluation.metrics import EvaluationMetrics

__all__ = [
    "EvaluationMetrics",
]
