#!/usr/bin/env python3
"""
Model Summary Persistence

Fitted models only live for one run; what is kept is a JSON summary
(coefficients, standard errors, fit statistics, metrics) for the report
that consumes it.

Usage:
    from ml_engineering.utils.persistence import save_model_summary, load_model_summary

    path = save_model_summary(model, 'nypd_shootings', metrics={'auc': 0.61})
    summary = load_model_summary(path)
"""

import json
import math
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional

from config.paths import GOLD_MODELS
from ml_engineering.models.regression import FittedModel


def _json_safe(value):
    """NaN/inf are not valid JSON: store them as null"""
    if isinstance(value, float) and not math.isfinite(value):
        return None
    if isinstance(value, dict):
        return {k: _json_safe(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_json_safe(v) for v in value]
    return value


def save_model_summary(
    model: FittedModel,
    name: str,
    metrics: Optional[Dict[str, float]] = None,
    output_dir=GOLD_MODELS,
    verbose: bool = True
) -> Path:
    """
    Write a model summary JSON file

    Args:
        model: Fitted model
        name: Dataset / run name used in the file name
        metrics: Optional evaluation metrics
        output_dir: Directory for the summary

    Returns:
        Path to the written file
    """
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)

    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    summary = model.summary()
    summary['name'] = name
    summary['timestamp'] = timestamp
    summary['metrics'] = {k: float(v) for k, v in (metrics or {}).items()}

    path = output_dir / f'{name}_{model.model_type}.json'
    with open(path, 'w') as f:
        json.dump(_json_safe(summary), f, indent=2)

    if verbose:
        print(f'\n💾 Saved model summary to {path}')

    return path


def load_model_summary(path) -> Dict[str, Any]:
    """Read a summary written by save_model_summary"""
    with open(path, 'r') as f:
        return json.load(f)
