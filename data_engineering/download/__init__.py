"""
Data Download Module

Loads raw delimited tables from local files or HTTP(S) URLs:
- Epidemic time series (one column per date)
- Incident-level records (one row per incident)
"""

from .table_loader import load_table, require_columns, is_url

__all__ = [
    'load_table',
    'require_columns',
    'is_url',
]
