"""Group aggregation"""

from .aggregate import (
    group_sum,
    group_count,
    sort_groups,
    daily_increments,
    per_capita,
    UNKNOWN_GROUP
)

__all__ = [
    'group_sum',
    'group_count',
    'sort_groups',
    'daily_increments',
    'per_capita',
    'UNKNOWN_GROUP'
]
