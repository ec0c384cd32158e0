#!/usr/bin/env python3
"""
Dummy Encoding for Categorical Predictors

Each predictor's levels are sorted and the first level is the reference
(dropped), matching OneHotEncoder(drop='first'). Missing predictor values
become an explicit "unknown" level so no row is lost. Levels not seen at
fit time encode as the reference level (all zeros), like
handle_unknown='ignore'.

Column names follow the patsy convention: BORO[T.BROOKLYN].

Usage:
    from ml_engineering.preprocessing.encoding import fit_levels, encode_dummies

    levels = fit_levels(df, ['BORO', 'PERP_SEX'])
    X = encode_dummies(df, levels)
"""

from typing import Dict, List, Optional, Sequence

import pandas as pd

from data_engineering.utils.errors import ConfigError

UNKNOWN_LEVEL = 'unknown'


def as_levels(values: pd.Series) -> pd.Series:
    """Predictor values as strings, nulls replaced by the unknown level"""
    return values.astype(object).where(values.notna(), UNKNOWN_LEVEL).astype(str)


def fit_levels(features: pd.DataFrame, predictor_columns: Sequence[str]) -> Dict[str, List[str]]:
    """Sorted levels per predictor; the first is the reference level"""
    return {
        col: sorted(as_levels(features[col]).unique().tolist())
        for col in predictor_columns
    }


def dummy_name(column: str, level: str) -> str:
    return f'{column}[T.{level}]'


def design_columns(levels: Dict[str, List[str]]) -> List[str]:
    """Encoded column names (reference levels excluded), in predictor order"""
    return [dummy_name(col, level) for col, col_levels in levels.items() for level in col_levels[1:]]


def encode_dummies(features: pd.DataFrame, levels: Dict[str, List[str]]) -> pd.DataFrame:
    """
    Encode predictors as 0/1 float columns

    Args:
        features: Table holding every predictor in `levels`
        levels: Output of fit_levels (defines reference and column order)

    Returns:
        DataFrame (same index as features) with one column per non-reference level
    """
    encoded = {}
    for col, col_levels in levels.items():
        values = as_levels(features[col])
        for level in col_levels[1:]:
            encoded[dummy_name(col, level)] = (values == level).astype(float)

    return pd.DataFrame(encoded, index=features.index, columns=design_columns(levels))


def check_for_leakage(predictor_columns: Sequence[str], outcome_column: Optional[str]):
    """
    The outcome must never be used as its own predictor

    Raises:
        ConfigError if the outcome column is listed among the predictors
    """
    if outcome_column is not None and outcome_column in predictor_columns:
        raise ConfigError(
            f'DATA LEAKAGE DETECTED: outcome {outcome_column!r} is listed as a predictor'
        )
    duplicates = {col for col in predictor_columns if list(predictor_columns).count(col) > 1}
    if duplicates:
        raise ConfigError(f'Predictors listed more than once: {sorted(duplicates)}')
