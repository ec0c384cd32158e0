"""
Data Engineering Module for incident and epidemic time-series summaries

This module contains all data engineering code organized by pipeline stage:
1. download/ - Load delimited tables from files or URLs
2. clean/ - Wide → long reshaping and date parsing
3. features/ - Derived flags and category buckets
4. datasets/ - Group aggregation
5. utils/ - Errors and schema validation

Usage:
    from data_engineering.clean import reshape_wide_to_long
    from data_engineering.datasets import group_sum
"""

__version__ = "1.0.0"
