#!/usr/bin/env python3
"""
Category Bucketing

Maps raw categorical values (country names) onto coarser buckets
(continents) through an ordered list of explicit rules. The first rule
whose value set contains the input wins; anything unmatched falls back
to "Other".

The default continent rules cover only a short list of countries, as the
source reports did. Most countries land in "Other"; broader coverage
belongs in the run configuration, not here.

Usage:
    from data_engineering.features.categorize import bucket, DEFAULT_CONTINENT_RULES

    bucket('Italy', DEFAULT_CONTINENT_RULES)   # 'Europe'
    bucket('Chad', DEFAULT_CONTINENT_RULES)    # 'Other'
"""

from typing import Any, FrozenSet, Iterable, List, Mapping, NamedTuple, Sequence

import pandas as pd

from data_engineering.download.table_loader import require_columns

FALLBACK_LABEL = 'Other'


class CategoryRule(NamedTuple):
    values: FrozenSet[Any]
    label: str


def bucket(value, rules: Sequence[CategoryRule]) -> str:
    """Label of the first rule containing `value`, else "Other" (never raises)"""
    for values, label in rules:
        try:
            if value in values:
                return label
        except TypeError:
            # Unhashable input cannot match a set of hashable values
            continue
    return FALLBACK_LABEL


def make_rules(pairs: Iterable) -> List[CategoryRule]:
    """Build rules from (values, label) pairs, keeping their order"""
    return [CategoryRule(frozenset(values), label) for values, label in pairs]


def rules_from_mapping(mapping: Mapping[str, Iterable]) -> List[CategoryRule]:
    """Build rules from {label: values}; insertion order is rule priority"""
    return make_rules((values, label) for label, values in mapping.items())


def rules_from_config(rules: Sequence[Mapping[str, Any]]) -> List[CategoryRule]:
    """Build rules from the JSON configuration shape [{"label": ..., "values": [...]}]"""
    return make_rules((rule['values'], rule['label']) for rule in rules)


def bucket_column(
    table: pd.DataFrame,
    column: str,
    rules: Sequence[CategoryRule],
    output_column: str = 'category'
) -> pd.DataFrame:
    """Add `output_column` holding bucket(value) for every row of `column`"""
    require_columns(table, [column], context='bucket_column')
    out = table.copy()
    out[output_column] = [bucket(value, rules) for value in table[column]]
    return out


DEFAULT_CONTINENT_RULES = rules_from_mapping({
    'North America': ['US', 'Canada', 'Mexico'],
    'South America': ['Brazil', 'Argentina', 'Colombia', 'Peru', 'Chile'],
    'Europe': ['United Kingdom', 'France', 'Germany', 'Italy', 'Spain', 'Russia'],
    'Asia': ['China', 'India', 'Japan', 'Korea, South', 'Iran', 'Indonesia'],
    'Africa': ['South Africa', 'Egypt', 'Nigeria', 'Morocco'],
    'Oceania': ['Australia', 'New Zealand'],
})
