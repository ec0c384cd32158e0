"""
ML Utilities Module

Model summary persistence
"""

from .persistence import (
    save_model_summary,
    load_model_summary
)

__all__ = [
    'save_model_summary',
    'load_model_summary',
]
