"""
ML Preprocessing Module

Dummy encoding of categorical predictors (first level as reference) and
predictor/outcome sanity checks.
"""

from .encoding import (
    fit_levels,
    encode_dummies,
    design_columns,
    check_for_leakage,
    UNKNOWN_LEVEL
)

__all__ = [
    'fit_levels',
    'encode_dummies',
    'design_columns',
    'check_for_leakage',
    'UNKNOWN_LEVEL',
]
