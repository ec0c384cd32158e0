"""Shared fixtures: small wide time-series and incident tables"""

import sys
from pathlib import Path

import numpy as np
import pandas as pd
import pytest

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))


@pytest.fixture
def wide_cases():
    """JHU-style cumulative case counts, one column per date"""
    return pd.DataFrame({
        'Province/State': [np.nan, 'Ontario', np.nan],
        'Country/Region': ['Italy', 'Canada', 'Chad'],
        'Lat': [41.87, 51.25, 15.45],
        'Long': [12.57, -85.32, 18.73],
        '1/22/20': [0, 1, 0],
        '1/23/20': [2, 3, 0],
        '1/24/20': [5, 4, 1],
    })


@pytest.fixture
def incidents():
    """NYPD-style shooting incidents, one row per incident"""
    rows = [
        ('01/15/2020', 'BRONX', 'F', 'Y'),
        ('02/11/2020', 'BRONX', 'F', 'N'),
        ('03/02/2020', 'BRONX', 'M', 'Y'),
        ('05/20/2021', 'BRONX', 'M', 'N'),
        ('06/30/2021', 'BRONX', 'M', 'N'),
        ('07/04/2020', 'BROOKLYN', 'F', 'Y'),
        ('08/19/2020', 'BROOKLYN', 'F', 'N'),
        ('09/09/2021', 'BROOKLYN', 'F', 'N'),
        ('10/31/2021', 'BROOKLYN', 'M', 'Y'),
        ('12/24/2021', 'BROOKLYN', 'M', 'N'),
        ('12/25/2021', 'BROOKLYN', 'M', None),
    ]
    return pd.DataFrame(rows, columns=['OCCUR_DATE', 'BORO', 'VIC_SEX', 'STATISTICAL_MURDER_FLAG'])


@pytest.fixture
def graded_outcomes():
    """One predictor whose levels have fatality rates .25 / .5 / .75"""
    boro = ['A'] * 4 + ['B'] * 4 + ['C'] * 4
    outcome = [1, 0, 0, 0] + [1, 1, 0, 0] + [1, 1, 1, 0]
    return pd.DataFrame({'boro': boro}), pd.Series(outcome)
