"""Reshaping and date handling"""

from .reshape import (
    reshape_wide_to_long,
    pivot_long_to_wide,
    parse_dates,
    add_date_parts,
    elapsed_days
)

__all__ = [
    'reshape_wide_to_long',
    'pivot_long_to_wide',
    'parse_dates',
    'add_date_parts',
    'elapsed_days'
]
