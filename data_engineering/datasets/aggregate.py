#!/usr/bin/env python3
"""
Group Aggregation

Sums / counts metrics per group key (region + date, continent + date,
borough + year, ...).

Rules:
- Rows with a null key value land in an explicit "unknown" bucket; they are
  never dropped.
- Output group order is NOT part of the contract. Sort explicitly
  (sort_groups) when a deterministic order is needed.

Usage:
    from data_engineering.datasets.aggregate import group_sum, sort_groups

    by_continent = group_sum(tidy, ['continent', 'date'], ['new_cases'])
    by_continent = sort_groups(by_continent, ['continent', 'date'])
"""

from typing import Optional, Sequence

import pandas as pd
from pandas.api.types import is_bool_dtype, is_numeric_dtype

from data_engineering.download.table_loader import require_columns
from data_engineering.utils.errors import SchemaMismatch

UNKNOWN_GROUP = 'unknown'


def fill_unknown_keys(table: pd.DataFrame, columns: Sequence[str]) -> pd.DataFrame:
    """Copy of the key columns with nulls replaced by the "unknown" bucket"""
    keys = table[list(columns)].copy()
    for col in columns:
        missing = keys[col].isna()
        if missing.any():
            keys[col] = keys[col].astype(object).where(~missing, UNKNOWN_GROUP)
    return keys


def _numeric_metric(table: pd.DataFrame, column: str) -> pd.Series:
    values = table[column]
    if is_bool_dtype(values):
        return values.astype('Int64')
    if not is_numeric_dtype(values):
        raise SchemaMismatch(detail=f'metric column {column!r} is not numeric ({values.dtype})')
    return values


def group_sum(
    table: pd.DataFrame,
    group_by_columns: Sequence[str],
    metric_columns: Sequence[str]
) -> pd.DataFrame:
    """
    Sum metrics per distinct group key

    Args:
        table: Input table (not modified)
        group_by_columns: Ordered key columns
        metric_columns: Numeric (or boolean) columns to sum; nulls count as 0

    Returns:
        One row per group: key columns followed by summed metrics

    Raises:
        SchemaMismatch: Missing or non-numeric columns
    """
    group_by_columns = list(group_by_columns)
    metric_columns = list(metric_columns)
    if not group_by_columns:
        raise ValueError('group_by_columns must not be empty')
    require_columns(table, group_by_columns + metric_columns, context='group_sum')

    work = fill_unknown_keys(table, group_by_columns)
    for col in metric_columns:
        work[col] = _numeric_metric(table, col)

    summed = work.groupby(group_by_columns, sort=False)[metric_columns].sum()
    return summed.reset_index()


def group_count(
    table: pd.DataFrame,
    group_by_columns: Sequence[str],
    count_column: str = 'count'
) -> pd.DataFrame:
    """Number of rows per distinct group key (same "unknown" rule as group_sum)"""
    group_by_columns = list(group_by_columns)
    if not group_by_columns:
        raise ValueError('group_by_columns must not be empty')
    require_columns(table, group_by_columns, context='group_count')

    keys = fill_unknown_keys(table, group_by_columns)
    counts = keys.groupby(group_by_columns, sort=False).size()
    return counts.reset_index(name=count_column)


def sort_groups(rows: pd.DataFrame, columns: Optional[Sequence[str]] = None) -> pd.DataFrame:
    """
    Deterministic ordering of aggregate rows

    Key columns mixing the "unknown" string with dates or numbers are
    compared by their string form.
    """
    columns = list(columns) if columns is not None else [rows.columns[0]]
    try:
        ordered = rows.sort_values(columns, kind='stable')
    except TypeError:
        ordered = rows.sort_values(columns, kind='stable', key=lambda s: s.astype(str))
    return ordered.reset_index(drop=True)


def daily_increments(
    long_table: pd.DataFrame,
    id_columns: Sequence[str],
    date_column: str = 'date',
    value_column: str = 'value',
    output_column: str = 'new'
) -> pd.DataFrame:
    """
    Convert cumulative counts to per-date increments within each entity

    The first date of an entity keeps its cumulative value. A missing
    cumulative value leaves both its own increment and the next one NaN.
    Output is sorted by entity (order of first appearance) and date.
    """
    id_columns = list(id_columns)
    require_columns(long_table, id_columns + [date_column, value_column], context='daily_increments')

    keys = fill_unknown_keys(long_table, id_columns)
    entity = keys.groupby(id_columns, sort=False).ngroup()

    out = long_table.assign(__entity__=entity)
    out = out.sort_values(['__entity__', date_column], kind='stable')

    grouped = out.groupby('__entity__', sort=False)
    first = grouped.cumcount() == 0
    # Only the first date takes its cumulative value; a gap stays NaN
    out[output_column] = grouped[value_column].diff().where(~first, out[value_column])

    return out.drop(columns='__entity__').reset_index(drop=True)


def per_capita(
    table: pd.DataFrame,
    metric_column: str,
    population_column: str,
    per: int = 1000,
    output_column: Optional[str] = None
) -> pd.DataFrame:
    """Metric per `per` people; zero or missing population gives NaN"""
    require_columns(table, [metric_column, population_column], context='per_capita')

    output_column = output_column or f'{metric_column}_per_{per}'
    population = pd.to_numeric(table[population_column], errors='coerce')
    population = population.where(population > 0)

    out = table.copy()
    out[output_column] = table[metric_column] / population * per
    return out
