"""
ML Models Module

Linear (OLS) and logistic (IRLS) regression for incident summaries
"""

from .regression import (
    FittedModel,
    fit_linear,
    fit_logistic,
    probability_bins,
    LINEAR,
    LOGISTIC
)

__all__ = [
    'FittedModel',
    'fit_linear',
    'fit_logistic',
    'probability_bins',
    'LINEAR',
    'LOGISTIC',
]
