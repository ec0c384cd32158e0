"""
Model Evaluation Module

Fit metrics for linear and logistic regressions
"""

from .metrics import (
    evaluate_linear,
    evaluate_logistic
)

__all__ = [
    'evaluate_linear',
    'evaluate_logistic',
]
