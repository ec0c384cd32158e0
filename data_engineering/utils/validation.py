#!/usr/bin/env python3
"""
Data Quality and Schema Validation

Uses pandera to validate tables for:
- Schema compliance (configured columns present, optional dtypes)
- Data quality checks (missing values, duplicate rows)

Usage:
    from data_engineering.utils.validation import validate_table

    validate_table(df, {'BORO': str, 'OCCUR_DATE': str, 'STATISTICAL_MURDER_FLAG': None}, 'shootings')
"""

from typing import Dict, Iterable, Mapping, Optional, Union

import pandas as pd
import pandera as pa
from pandera import Column, Check

from data_engineering.utils.errors import SchemaMismatch

ColumnSpec = Union[Iterable[str], Mapping[str, Optional[type]]]


def build_schema(columns: ColumnSpec, name: str = 'table') -> pa.DataFrameSchema:
    """
    Build a non-strict pandera schema from configured column names

    Args:
        columns: Column names, or a mapping of column name to dtype (None = any dtype)
        name: Table name used in the schema description

    Returns:
        pandera DataFrameSchema
    """
    if not isinstance(columns, Mapping):
        columns = {col: None for col in columns}

    return pa.DataFrameSchema(
        {col: Column(dtype, nullable=True, required=True) for col, dtype in columns.items()},
        strict=False,  # Allow extra columns not defined here
        coerce=False,
        description=f'{name} schema'
    )


def validate_table(
    df: pd.DataFrame,
    columns: ColumnSpec,
    name: str = 'table',
    verbose: bool = False
) -> bool:
    """
    Validate that a table has the configured columns (and dtypes)

    Args:
        df: DataFrame to validate
        columns: Column names, or mapping of column name to dtype
        name: Table name for messages

    Returns:
        True if validation passes

    Raises:
        SchemaMismatch: If columns are missing or a dtype check fails
    """
    schema = build_schema(columns, name)
    expected = list(schema.columns)
    missing = [col for col in expected if col not in df.columns]

    try:
        schema.validate(df, lazy=True)
    except pa.errors.SchemaErrors as err:
        cases = err.failure_cases
        detail = f'{len(cases)} failure case(s): ' + ', '.join(
            sorted({str(check) for check in cases['check']})
        )
        raise SchemaMismatch(missing, source=name, detail=detail) from err

    if verbose:
        print(f'  ✓ Schema validation passed for {name} ({len(expected)} columns)')

    return True


def validate_binary_outcome(df: pd.DataFrame, outcome_column: str, name: str = 'table') -> bool:
    """Check that the outcome column only holds 0/1 (nulls allowed, dropped before fitting)"""
    schema = pa.DataFrameSchema(
        {outcome_column: Column(checks=Check.isin([0, 1, True, False]), nullable=True)},
        strict=False
    )
    try:
        schema.validate(df, lazy=True)
    except pa.errors.SchemaErrors as err:
        bad = err.failure_cases['failure_case'].unique().tolist()
        raise SchemaMismatch(
            [c for c in [outcome_column] if c not in df.columns],
            source=name,
            detail=f'{outcome_column!r} must be binary, found {bad[:5]}'
        ) from err
    return True


def check_data_quality(df: pd.DataFrame, name: str) -> Dict[str, float]:
    """
    Perform data quality checks beyond schema validation

    Checks:
    - Missing value percentages
    - Duplicate rows

    Returns:
        Dict of column -> missing percentage (columns with any missing values)
    """
    if len(df) == 0:
        print(f'  ⚠️  {name} is empty')
        return {}

    missing_pct = (df.isnull().sum() / len(df) * 100).sort_values(ascending=False)
    missing_pct = missing_pct[missing_pct > 0]

    high_missing = missing_pct[missing_pct > 50]
    if len(high_missing) > 0:
        print(f'  ⚠️  High missing values (>50%) in {name}:')
        for col, pct in high_missing.items():
            print(f'     - {col}: {pct:.1f}%')

    dup_count = df.duplicated().sum()
    if dup_count > 0:
        print(f'  ⚠️  WARNING: {dup_count:,} duplicate rows found in {name}')

    return missing_pct.to_dict()
