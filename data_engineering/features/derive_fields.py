#!/usr/bin/env python3
"""
Derived Boolean Fields

Turns raw flag columns into booleans, e.g. is_fatal from the NYPD
STATISTICAL_MURDER_FLAG column ("Y"/"N" in older exports, true/false in newer).

Derivation never raises for missing input: optional demographic and flag
fields are frequently absent, so a missing or unrecognised value yields
None (pandas <NA> in a table) instead of an error.

Usage:
    from data_engineering.features.derive_fields import FlagRule, derive_table_fields

    rules = {'is_fatal': FlagRule('STATISTICAL_MURDER_FLAG', {'Y', 'true'}, {'N', 'false'})}
    df = derive_table_fields(df, rules)
"""

from dataclasses import dataclass
from typing import Any, Dict, FrozenSet, Mapping, Optional

import pandas as pd


def _normalise(value) -> str:
    return str(value).strip().lower()


def _is_missing(value) -> bool:
    try:
        return bool(pd.isna(value))
    except (TypeError, ValueError):
        return False


@dataclass(frozen=True)
class FlagRule:
    """Map a raw column onto True/False/unknown (matching is case-insensitive)"""
    source: str
    true_values: FrozenSet[str]
    false_values: Optional[FrozenSet[str]] = None

    def __post_init__(self):
        object.__setattr__(self, 'true_values', frozenset(_normalise(v) for v in self.true_values))
        if self.false_values is not None:
            object.__setattr__(self, 'false_values', frozenset(_normalise(v) for v in self.false_values))

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> 'FlagRule':
        false_values = data.get('false_values')
        return cls(
            source=data['source'],
            true_values=frozenset(data['true_values']),
            false_values=frozenset(false_values) if false_values is not None else None
        )

    def evaluate(self, value) -> Optional[bool]:
        if _is_missing(value):
            return None
        key = _normalise(value)
        if key in self.true_values:
            return True
        if self.false_values is None or key in self.false_values:
            return False
        return None


def derive_fields(record: Mapping[str, Any], rules: Mapping[str, FlagRule]) -> Dict[str, Any]:
    """
    Derive boolean fields for one record

    Args:
        record: Raw field values (not modified)
        rules: Output field name -> FlagRule

    Returns:
        New dict with the record's fields plus the derived ones
    """
    derived = dict(record)
    for name, rule in rules.items():
        derived[name] = rule.evaluate(record.get(rule.source))
    return derived


def derive_table_fields(table: pd.DataFrame, rules: Mapping[str, FlagRule]) -> pd.DataFrame:
    """
    Vectorised derive_fields over a table

    Derived columns use the nullable 'boolean' dtype. A rule whose source
    column is absent yields an all-<NA> column.
    """
    out = table.copy()
    for name, rule in rules.items():
        if rule.source in table.columns:
            values = [rule.evaluate(v) for v in table[rule.source]]
        else:
            values = [None] * len(table)
        out[name] = pd.array(values, dtype='boolean')
    return out


def rules_from_config(config: Mapping[str, Mapping[str, Any]]) -> Dict[str, FlagRule]:
    """Build FlagRules from the JSON configuration shape"""
    return {name: FlagRule.from_dict(rule) for name, rule in config.items()}
