"""
Pipeline Configuration

Dataset-specific column names, category rules and model choice for one
end-to-end run. Nothing about a dataset is hard-coded in the library; a run
is fully described by one JSON file.

Usage:
    from config.pipeline_config import PipelineConfig

    config = PipelineConfig.from_json('config/examples/covid_global_cases.json')
    print(config.model_type, config.group_by_columns)
"""

import json
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, List, Optional

from config.paths import GOLD
from data_engineering.utils.errors import ConfigError

LAYOUTS = ('wide', 'long')
MODEL_TYPES = ('linear', 'logistic')

# JHU CSSE style headers: 1/22/20, 12/31/21
DEFAULT_DATE_COLUMN_MATCHER = r'^\d{1,2}/\d{1,2}/\d{2}$'
DEFAULT_DATE_FORMAT = '%m/%d/%y'


@dataclass(frozen=True)
class PipelineConfig:
    """Options a caller supplies for one run"""
    source: str
    name: str = 'dataset'
    layout: str = 'wide'
    sep: str = ','

    # Reshape / dates
    id_columns: List[str] = field(default_factory=list)
    date_column_matcher: str = DEFAULT_DATE_COLUMN_MATCHER
    date_column: str = 'date'
    date_format: str = DEFAULT_DATE_FORMAT
    value_column: str = 'value'
    cumulative: bool = False

    # Derived fields and categories
    flag_rules: Dict[str, Dict[str, Any]] = field(default_factory=dict)
    category_source: Optional[str] = None
    category_column: str = 'category'
    category_rules: List[Dict[str, Any]] = field(default_factory=list)

    # Aggregation
    group_by_columns: List[str] = field(default_factory=list)
    metric_columns: List[str] = field(default_factory=list)

    # Model
    model_type: Optional[str] = None
    predictor_columns: List[str] = field(default_factory=list)
    outcome_column: Optional[str] = None
    max_iter: int = 100
    tol: float = 1e-8
    allow_separation: bool = False

    output_dir: Path = GOLD

    def __post_init__(self):
        if not self.source:
            raise ConfigError('source is required')

        if self.layout not in LAYOUTS:
            raise ConfigError(f'layout must be one of {LAYOUTS}, got {self.layout!r}')

        if self.layout == 'wide' and not self.id_columns:
            raise ConfigError('id_columns are required for a wide layout')

        if self.model_type is not None and self.model_type not in MODEL_TYPES:
            raise ConfigError(f'model_type must be one of {MODEL_TYPES}, got {self.model_type!r}')

        if self.model_type == 'logistic':
            if not self.predictor_columns or not self.outcome_column:
                raise ConfigError('logistic model needs predictor_columns and outcome_column')

        if self.model_type == 'linear' and not self.outcome_column:
            raise ConfigError('linear model needs outcome_column')

        for rule in self.category_rules:
            if 'label' not in rule or 'values' not in rule:
                raise ConfigError(f'category rule needs "label" and "values": {rule}')

        for name, rule in self.flag_rules.items():
            if 'source' not in rule or 'true_values' not in rule:
                raise ConfigError(f'flag rule {name!r} needs "source" and "true_values"')

        # Frozen dataclass: normalise output_dir through object.__setattr__
        object.__setattr__(self, 'output_dir', Path(self.output_dir))

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'PipelineConfig':
        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            raise ConfigError(f'Unknown configuration fields: {sorted(unknown)}')
        if 'source' not in data:
            raise ConfigError('source is required')
        return cls(**data)

    @classmethod
    def from_json(cls, path) -> 'PipelineConfig':
        """Load a configuration file; relative sources resolve against the file"""
        path = Path(path)
        try:
            with open(path, 'r') as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise ConfigError(f'Cannot read configuration {path}: {e}') from e

        if not isinstance(data, dict):
            raise ConfigError(f'Configuration {path} must be a JSON object')

        source = data.get('source')
        if source and '://' not in source and not Path(source).is_absolute():
            data['source'] = str(path.parent / source)

        return cls.from_dict(data)
