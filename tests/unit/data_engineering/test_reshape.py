import numpy as np
import pandas as pd
import pytest

from data_engineering.clean.reshape import (
    reshape_wide_to_long, pivot_long_to_wide, parse_dates, add_date_parts, elapsed_days,
    select_date_columns
)
from data_engineering.utils.errors import DateParseError, SchemaMismatch

ID_COLUMNS = ['Province/State', 'Country/Region']


def test_reshape_emits_one_row_per_entity_date(wide_cases):
    long = reshape_wide_to_long(wide_cases, ID_COLUMNS, value_column='cases')

    assert list(long.columns) == ID_COLUMNS + ['date', 'cases']
    assert len(long) == 3 * 3
    # Ordered by original row, then date column
    assert long['Country/Region'].tolist()[:3] == ['Italy'] * 3
    assert long['cases'].tolist() == [0, 2, 5, 1, 3, 4, 0, 0, 1]
    assert long['date'].iloc[0] == pd.Timestamp('2020-01-22')
    assert long['date'].iloc[2] == pd.Timestamp('2020-01-24')


def test_reshape_drops_non_date_columns(wide_cases):
    long = reshape_wide_to_long(wide_cases, ID_COLUMNS)

    assert 'Lat' not in long.columns
    assert 'Long' not in long.columns


def test_reshape_keeps_null_ids(wide_cases):
    long = reshape_wide_to_long(wide_cases, ID_COLUMNS)

    assert long['Province/State'].isna().sum() == 6


def test_reshape_does_not_modify_input(wide_cases):
    before = wide_cases.copy()
    reshape_wide_to_long(wide_cases, ID_COLUMNS)
    pd.testing.assert_frame_equal(wide_cases, before)


def test_callable_matcher(wide_cases):
    long = reshape_wide_to_long(wide_cases, ID_COLUMNS, date_column_matcher=lambda c: c.startswith('1/2'))

    assert long['date'].nunique() == 3


def test_unparseable_date_aborts():
    wide = pd.DataFrame({'region': ['A'], '1/22/20': [1], '13/45/20': [2]})

    with pytest.raises(DateParseError) as excinfo:
        reshape_wide_to_long(wide, ['region'])

    assert excinfo.value.column == '13/45/20'
    assert excinfo.value.date_format == '%m/%d/%y'


def test_no_date_columns_is_schema_mismatch():
    wide = pd.DataFrame({'region': ['A'], 'population': [10]})

    with pytest.raises(SchemaMismatch):
        reshape_wide_to_long(wide, ['region'])


def test_missing_id_column_is_schema_mismatch(wide_cases):
    with pytest.raises(SchemaMismatch) as excinfo:
        reshape_wide_to_long(wide_cases, ['Admin2'])
    assert excinfo.value.missing_columns == ['Admin2']


def test_select_date_columns_preserves_table_order(wide_cases):
    assert select_date_columns(wide_cases, ID_COLUMNS, r'^\d') == ['1/22/20', '1/23/20', '1/24/20']


def test_round_trip_reproduces_wide_table():
    wide = pd.DataFrame({
        'Province/State': [np.nan, 'Ontario', 'Quebec'],
        'Country/Region': ['Italy', 'Canada', 'Canada'],
        '01/22/20': [0, 1, 7],
        '01/23/20': [2, 3, 8],
        '01/24/20': [5, 4, 9],
    })

    long = reshape_wide_to_long(wide, ID_COLUMNS)
    back = pivot_long_to_wide(long, ID_COLUMNS, date_format='%m/%d/%y')

    pd.testing.assert_frame_equal(back, wide, check_dtype=False)


def test_pivot_rejects_duplicate_entity_dates():
    long = pd.DataFrame({
        'region': ['A', 'A'],
        'date': pd.to_datetime(['2020-01-01', '2020-01-01']),
        'value': [1, 2],
    })

    with pytest.raises(SchemaMismatch):
        pivot_long_to_wide(long, ['region'])


def test_parse_dates_with_fixed_format(incidents):
    parsed = parse_dates(incidents, 'OCCUR_DATE', '%m/%d/%Y')

    assert parsed['OCCUR_DATE'].iloc[0] == pd.Timestamp('2020-01-15')
    # Input is untouched
    assert incidents['OCCUR_DATE'].iloc[0] == '01/15/2020'


def test_parse_dates_keeps_nulls():
    table = pd.DataFrame({'when': ['01/02/2020', None]})

    parsed = parse_dates(table, 'when', '%m/%d/%Y')

    assert pd.isna(parsed['when'].iloc[1])


def test_parse_dates_reports_row_of_bad_value():
    table = pd.DataFrame({'when': ['01/02/2020', '2020-01-03', '01/04/2020']})

    with pytest.raises(DateParseError) as excinfo:
        parse_dates(table, 'when', '%m/%d/%Y')

    assert excinfo.value.row_index == 1
    assert excinfo.value.value == '2020-01-03'


def test_add_date_parts():
    table = pd.DataFrame({'date': pd.to_datetime(['2020-03-15', '2021-12-01', None])})

    out = add_date_parts(table, 'date')

    assert out['year'].tolist()[:2] == [2020, 2021]
    assert out['month'].tolist()[:2] == [3, 12]
    assert pd.isna(out['year'].iloc[2])


def test_elapsed_days_from_earliest_date():
    days = elapsed_days(pd.to_datetime(['2020-01-03', '2020-01-01', '2020-01-11']))

    assert days.tolist() == [2.0, 0.0, 10.0]


def test_elapsed_days_with_origin():
    days = elapsed_days(['2020-02-01'], origin='2020-01-01')

    assert days.tolist() == [31.0]


def test_round_trip_keeps_unpadded_headers(wide_cases):
    wide = wide_cases.drop(columns=['Lat', 'Long'])

    long = reshape_wide_to_long(wide, ID_COLUMNS)
    back = pivot_long_to_wide(long, ID_COLUMNS, date_format='%m/%d/%y')

    assert list(back.columns) == ID_COLUMNS + ['1/22/20', '1/23/20', '1/24/20']
    pd.testing.assert_frame_equal(back, wide, check_dtype=False)


def test_pivot_with_explicit_labels():
    long = pd.DataFrame({
        'region': ['A', 'A'],
        'date': pd.to_datetime(['2020-01-22', '2020-01-23']),
        'value': [1, 2],
    })

    back = pivot_long_to_wide(long, ['region'], labels={'2020-01-22': 'day one'}, date_format='%Y-%m-%d')

    assert list(back.columns) == ['region', 'day one', '2020-01-23']
