#!/usr/bin/env python3
"""
Model Evaluation

In-sample fit metrics for the two regression types, computed with
scikit-learn.

Usage:
    from ml_engineering.evaluation.metrics import evaluate_logistic, evaluate_linear

    metrics = evaluate_logistic(model, df[predictors], df['is_fatal'], name='NYPD shootings')
    metrics = evaluate_linear(trend, days, new_cases)
"""

from typing import Dict

import numpy as np
import pandas as pd
from sklearn.metrics import (
    accuracy_score, precision_score, recall_score, f1_score, roc_auc_score,
    confusion_matrix, brier_score_loss,
    mean_squared_error, mean_absolute_error, r2_score
)

from ml_engineering.models.regression import FittedModel, LINEAR, LOGISTIC


def evaluate_logistic(
    model: FittedModel,
    features,
    outcome,
    name: str = 'Dataset',
    threshold: float = 0.5,
    verbose: bool = True
) -> Dict[str, float]:
    """
    Evaluate a fitted logistic model

    Args:
        model: FittedModel of type logistic
        features: Predictor table
        outcome: True 0/1 labels (rows with a missing label are skipped)
        name: Dataset name for printing
        threshold: Decision threshold (default: 0.5)

    Returns:
        Dict of metrics; auc is NaN when only one class is present
    """
    if model.model_type != LOGISTIC:
        raise ValueError(f'expected a logistic model, got {model.model_type}')

    features = pd.DataFrame(features).reset_index(drop=True)
    y = pd.Series(outcome).reset_index(drop=True)
    observed = y.notna().to_numpy()
    features = features[observed]
    y = y[observed].astype(int).to_numpy()

    y_proba = model.predict(features)
    y_pred = (y_proba >= threshold).astype(int)

    metrics = {
        'accuracy': accuracy_score(y, y_pred),
        'precision': precision_score(y, y_pred, zero_division=0),
        'recall': recall_score(y, y_pred, zero_division=0),
        'f1': f1_score(y, y_pred, zero_division=0),
        'auc': roc_auc_score(y, y_proba) if len(np.unique(y)) == 2 else float('nan'),
        'brier_score': brier_score_loss(y, y_proba),
        'threshold': threshold
    }

    if verbose:
        print(f'\n{"="*70}')
        print(f'EVALUATION: {name}')
        print(f'{"="*70}')

        print(f'\nMetrics:')
        print(f'  Accuracy:     {metrics["accuracy"]:.4f}')
        print(f'  Precision:    {metrics["precision"]:.4f}')
        print(f'  Recall:       {metrics["recall"]:.4f}')
        print(f'  F1 Score:     {metrics["f1"]:.4f}')
        print(f'  AUC-ROC:      {metrics["auc"]:.4f}')
        print(f'  Brier Score:  {metrics["brier_score"]:.4f} (lower is better)')

        cm = confusion_matrix(y, y_pred, labels=[0, 1])
        print(f'\nConfusion Matrix:')
        print(f'  TN: {cm[0,0]:,}  FP: {cm[0,1]:,}')
        print(f'  FN: {cm[1,0]:,}  TP: {cm[1,1]:,}')

    return metrics


def evaluate_linear(
    model: FittedModel,
    x,
    y,
    name: str = 'Dataset',
    verbose: bool = True
) -> Dict[str, float]:
    """
    Evaluate a fitted linear model

    Returns:
        Dict with rmse, mae, r2
    """
    if model.model_type != LINEAR:
        raise ValueError(f'expected a linear model, got {model.model_type}')

    y = np.asarray(y, dtype=float)
    y_pred = model.predict(x)

    metrics = {
        'rmse': float(np.sqrt(mean_squared_error(y, y_pred))),
        'mae': float(mean_absolute_error(y, y_pred)),
        'r2': float(r2_score(y, y_pred)),
    }

    if verbose:
        print(f'\n{"="*70}')
        print(f'EVALUATION: {name}')
        print(f'{"="*70}')
        print(f'  RMSE: {metrics["rmse"]:.4f}')
        print(f'  MAE:  {metrics["mae"]:.4f}')
        print(f'  R²:   {metrics["r2"]:.4f}')

    return metrics
