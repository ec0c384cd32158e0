"""Derived fields and category buckets"""

from .derive_fields import FlagRule, derive_fields, derive_table_fields
from .categorize import CategoryRule, bucket, bucket_column, DEFAULT_CONTINENT_RULES

__all__ = [
    'FlagRule',
    'derive_fields',
    'derive_table_fields',
    'CategoryRule',
    'bucket',
    'bucket_column',
    'DEFAULT_CONTINENT_RULES'
]
