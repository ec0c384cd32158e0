#!/usr/bin/env python3
"""
Wide ↔ Long Reshaping and Date Handling

Epidemic time series are published in wide form: one row per region and one
column per date ("1/22/20", "1/23/20", ...). Everything downstream works on
tidy (long) form: one row per (region, date).

Dates are always parsed with an explicit format. An unparseable date aborts
the run (DateParseError) rather than dropping rows, since a dropped date
would silently change every downstream sum.

Usage:
    from data_engineering.clean.reshape import reshape_wide_to_long, add_date_parts

    tidy = reshape_wide_to_long(df, ['Province/State', 'Country/Region'])
    tidy = add_date_parts(tidy, 'date')
"""

import re
from datetime import datetime
from typing import Callable, List, Mapping, Optional, Sequence, Union

import numpy as np
import pandas as pd

from data_engineering.datasets.aggregate import fill_unknown_keys
from data_engineering.download.table_loader import require_columns
from data_engineering.utils.errors import DateParseError, SchemaMismatch

DateMatcher = Union[str, Callable[[str], bool]]

# JHU CSSE headers: month/day/2-digit-year, no zero padding
DEFAULT_DATE_COLUMN_MATCHER = r'^\d{1,2}/\d{1,2}/\d{2}$'
DEFAULT_DATE_FORMAT = '%m/%d/%y'

_ENTITY = '__entity__'
_ROW = '__row__'
_POSITION = '__position__'

# attrs key of the {Timestamp: original header} map kept by reshape_wide_to_long
DATE_LABELS = 'date_labels'


def _matcher_predicate(matcher: DateMatcher) -> Callable[[str], bool]:
    if callable(matcher):
        return matcher
    pattern = re.compile(matcher)
    return lambda name: bool(pattern.search(str(name)))


def select_date_columns(table: pd.DataFrame, id_columns: Sequence[str], matcher: DateMatcher) -> List[str]:
    """Columns (in table order) whose names match the date-column matcher"""
    is_date = _matcher_predicate(matcher)
    return [col for col in table.columns if col not in id_columns and is_date(col)]


def parse_date_label(value, date_format: str, column: Optional[str] = None, row_index=None) -> pd.Timestamp:
    """Parse one date string with a fixed format"""
    try:
        return pd.Timestamp(datetime.strptime(str(value).strip(), date_format))
    except ValueError as e:
        raise DateParseError(column if column is not None else str(value), value, date_format, row_index) from e


def reshape_wide_to_long(
    table: pd.DataFrame,
    id_columns: Sequence[str],
    date_column_matcher: DateMatcher = DEFAULT_DATE_COLUMN_MATCHER,
    date_format: str = DEFAULT_DATE_FORMAT,
    date_column: str = 'date',
    value_column: str = 'value'
) -> pd.DataFrame:
    """
    Reshape one-column-per-date data into one row per (entity, date)

    Args:
        table: Wide table
        id_columns: Entity columns carried to every output row
        date_column_matcher: Regex (or predicate) selecting the date columns
        date_format: strptime format of the date column names
        date_column: Name of the parsed date column in the output
        value_column: Name of the value column in the output

    Returns:
        Long table ordered by original row, then date column order.
        Columns other than id_columns and the date columns are dropped.

    Raises:
        SchemaMismatch: id columns missing, or no column matches the matcher
        DateParseError: a matched column name does not parse with date_format
    """
    id_columns = list(id_columns)
    require_columns(table, id_columns, context='reshape_wide_to_long')

    date_columns = select_date_columns(table, id_columns, date_column_matcher)
    if not date_columns:
        raise SchemaMismatch(detail='no column matches the date-column matcher')

    parsed = {col: parse_date_label(col, date_format, column=col) for col in date_columns}
    position = {col: i for i, col in enumerate(date_columns)}

    wide = table[id_columns + date_columns].reset_index(drop=True)
    wide[_ROW] = np.arange(len(wide))

    long = wide.melt(
        id_vars=id_columns + [_ROW],
        value_vars=date_columns,
        var_name=date_column,
        value_name=value_column
    )
    long[_POSITION] = long[date_column].map(position)
    long = long.sort_values([_ROW, _POSITION], kind='stable')
    long[date_column] = pd.to_datetime(long[date_column].map(parsed))

    long = long.drop(columns=[_ROW, _POSITION]).reset_index(drop=True)
    long.attrs[DATE_LABELS] = {parsed[col]: col for col in date_columns}
    return long


def _date_label(date, labels: Mapping, date_format: Optional[str]):
    date = pd.Timestamp(date)
    if date in labels:
        return labels[date]
    if date_format is not None:
        return date.strftime(date_format)
    return date


def pivot_long_to_wide(
    long_table: pd.DataFrame,
    id_columns: Sequence[str],
    date_column: str = 'date',
    value_column: str = 'value',
    date_format: Optional[str] = None,
    labels: Optional[Mapping] = None
) -> pd.DataFrame:
    """
    Inverse of reshape_wide_to_long

    Entities keep their order of first appearance; date columns are ordered
    chronologically. Each date column is labelled, in order of preference,
    with `labels[date]`, the original header recorded by reshape_wide_to_long
    (so "1/22/20" stays unpadded), `date.strftime(date_format)`, or the
    timestamp itself.

    Raises:
        SchemaMismatch: Missing columns, or an (entity, date) pair appears twice
    """
    id_columns = list(id_columns)
    require_columns(long_table, id_columns + [date_column, value_column], context='pivot_long_to_wide')

    if labels is None:
        labels = long_table.attrs.get(DATE_LABELS, {})
    labels = {pd.Timestamp(date): label for date, label in labels.items()}

    keys = fill_unknown_keys(long_table, id_columns)
    work = long_table[id_columns + [date_column, value_column]].copy()
    work[_ENTITY] = keys.groupby(id_columns, sort=False).ngroup()

    try:
        values = work.pivot(index=_ENTITY, columns=date_column, values=value_column)
    except ValueError as e:
        raise SchemaMismatch(detail=f'duplicate (entity, {date_column}) pairs: {e}') from e

    values = values.reindex(columns=sorted(values.columns))
    values.columns = [_date_label(c, labels, date_format) for c in values.columns]

    ids = work.drop_duplicates(_ENTITY).set_index(_ENTITY)[id_columns]
    wide = ids.join(values)
    return wide.reset_index(drop=True)


def parse_dates(table: pd.DataFrame, column: str, date_format: str) -> pd.DataFrame:
    """
    Parse a date column of a row-per-incident table with a fixed format

    Null values stay null (NaT). Any non-null value that does not match
    raises DateParseError with its row index.
    """
    require_columns(table, [column], context='parse_dates')

    raw = table[column]
    parsed = pd.to_datetime(raw, format=date_format, errors='coerce')

    bad = parsed.isna() & raw.notna()
    if bad.any():
        row_index = bad.idxmax()
        raise DateParseError(column, raw.loc[row_index], date_format, row_index=row_index)

    out = table.copy()
    out[column] = parsed
    return out


def add_date_parts(table: pd.DataFrame, date_column: str = 'date') -> pd.DataFrame:
    """Derive year and month (nullable integers) from a parsed date column"""
    require_columns(table, [date_column], context='add_date_parts')

    dates = pd.to_datetime(table[date_column])
    out = table.copy()
    out['year'] = dates.dt.year.astype('Int64')
    out['month'] = dates.dt.month.astype('Int64')
    return out


def elapsed_days(dates, origin=None) -> pd.Series:
    """
    Days elapsed since `origin` (default: earliest date) as floats

    Used as the x variable when regressing a metric on time.
    """
    dates = pd.to_datetime(pd.Series(dates)).reset_index(drop=True)
    if origin is None:
        origin = dates.min()
    origin = pd.Timestamp(origin)
    return (dates - origin).dt.total_seconds() / 86400.0
