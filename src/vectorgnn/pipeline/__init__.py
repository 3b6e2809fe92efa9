"""
Query-path composition for vectorgnn.

index lookup -> differentiable search -> attention refinement -> report
"""

from vectorgnn.pipeline.refinement import (
    CandidateIndex,
    RefinementPipeline,
    RefinementReport,
)

__all__ = [
    "CandidateIndex",
    "RefinementPipeline",
    "RefinementReport",
]
