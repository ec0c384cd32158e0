#!/usr/bin/env python3
"""
Simple Regression Models

Two model types, selected by the caller:

1. Linear:   y = a + b*x by ordinary least squares (statsmodels OLS, QR solver).
             Typically a daily metric regressed on elapsed days.
2. Logistic: binary outcome vs. categorical predictors, dummy-encoded with
             the first level as reference, fitted by IRLS (statsmodels GLM,
             Binomial family). Iterates until the deviance (-2 log-likelihood)
             change is below `tol` or `max_iter` is reached.

Separation policy (logistic):
    Separation is detected when a predictor level only holds one outcome
    class, when fitted probabilities reach 0/1 (within 1e-8), or when
    statsmodels itself reports perfect separation.
    - allow_separation=False (default): raise SeparationDetected
    - allow_separation=True: return the fit flagged `separated=True`; its
      coefficients and standard errors are inflated and should not be read
      as estimates. Non-convergence is tolerated for separated fits.

Usage:
    from ml_engineering.models.regression import fit_linear, fit_logistic

    trend = fit_linear(days, new_cases)
    print(trend.a, trend.b, trend.r_squared)

    model = fit_logistic(df[['BORO', 'PERP_SEX']], df['is_fatal'])
    probs = model.predict(df[['BORO', 'PERP_SEX']])
"""

import warnings
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple

import numpy as np
import pandas as pd
import statsmodels.api as sm
from statsmodels.tools.sm_exceptions import PerfectSeparationError, PerfectSeparationWarning

from data_engineering.download.table_loader import require_columns
from ml_engineering.errors import InsufficientData, NonConvergence, SeparationDetected
from ml_engineering.preprocessing.encoding import as_levels, encode_dummies, fit_levels

LINEAR = 'linear'
LOGISTIC = 'logistic'
INTERCEPT = 'Intercept'

# Predicted probabilities are kept inside the open interval (0, 1)
PROBABILITY_CLIP = 1e-12
SEPARATION_EPS = 1e-8


@dataclass(frozen=True)
class FittedModel:
    """Coefficients, standard errors and fit statistics of one regression"""
    model_type: str
    predictor_names: Tuple[str, ...]
    coefficients: Tuple[float, ...]
    standard_errors: Tuple[float, ...]
    n_obs: int
    r_squared: Optional[float] = None
    log_likelihood: Optional[float] = None
    iterations: Optional[int] = None
    converged: bool = True
    separated: bool = False
    predictor_columns: Tuple[str, ...] = ()
    levels: Dict[str, List[str]] = field(default_factory=dict)

    @property
    def a(self) -> float:
        """Intercept"""
        return self.coefficients[0]

    @property
    def b(self) -> float:
        """Slope (linear models only)"""
        if self.model_type != LINEAR:
            raise AttributeError('slope is only defined for linear models')
        return self.coefficients[1]

    def coefficient(self, name: str) -> float:
        return self.coefficients[self.predictor_names.index(name)]

    def standard_error(self, name: str) -> float:
        return self.standard_errors[self.predictor_names.index(name)]

    def predict(self, new_features) -> np.ndarray:
        """
        Predicted values for new observations

        Linear: sequence of x values -> a + b*x
        Logistic: table of predictor columns -> probabilities clamped to
        [1e-12, 1 - 1e-12]; unseen levels are treated as the reference level
        """
        if self.model_type == LINEAR:
            x = np.asarray(new_features, dtype=float)
            return self.a + self.b * x

        features = pd.DataFrame(new_features)
        require_columns(features, self.predictor_columns, context='predict')
        X = encode_dummies(features, self.levels).to_numpy()
        eta = self.a + X @ np.asarray(self.coefficients[1:], dtype=float)
        with np.errstate(over='ignore'):
            probs = 1.0 / (1.0 + np.exp(-eta))
        return np.clip(probs, PROBABILITY_CLIP, 1.0 - PROBABILITY_CLIP)

    def summary(self) -> dict:
        """JSON-serialisable view of the fit"""
        return {
            'model_type': self.model_type,
            'n_obs': self.n_obs,
            'coefficients': dict(zip(self.predictor_names, map(float, self.coefficients))),
            'standard_errors': dict(zip(self.predictor_names, map(float, self.standard_errors))),
            'r_squared': self.r_squared,
            'log_likelihood': self.log_likelihood,
            'iterations': self.iterations,
            'converged': self.converged,
            'separated': self.separated,
            'reference_levels': {col: lv[0] for col, lv in self.levels.items() if lv},
        }


# ============================================================================
# LINEAR
# ============================================================================

def fit_linear(x: Sequence[float], y: Sequence[float]) -> FittedModel:
    """
    Fit y = a + b*x by ordinary least squares

    Args:
        x: Predictor values (e.g. elapsed days)
        y: Outcome values

    Returns:
        FittedModel with a, b, standard errors and R²

    Raises:
        ValueError: x and y have different lengths
        InsufficientData: Fewer than 2 distinct x values, or non-finite values
    """
    x = np.asarray(x, dtype=float).ravel()
    y = np.asarray(y, dtype=float).ravel()

    if x.shape != y.shape:
        raise ValueError(f'x and y lengths differ: {len(x)} vs {len(y)}')

    finite = np.isfinite(x) & np.isfinite(y)
    if not finite.all():
        raise InsufficientData(f'{(~finite).sum()} non-finite value(s) in x/y')

    distinct = np.unique(x).size
    if distinct < 2:
        raise InsufficientData(f'Linear fit needs at least 2 distinct x values, got {distinct}')

    X = sm.add_constant(x, has_constant='add')
    with warnings.catch_warnings():
        # Two points leave no residual degrees of freedom: SEs are NaN
        warnings.simplefilter('ignore', RuntimeWarning)
        results = sm.OLS(y, X).fit(method='qr')
        r_squared = float(results.rsquared)

    return FittedModel(
        model_type=LINEAR,
        predictor_names=(INTERCEPT, 'x'),
        coefficients=tuple(float(v) for v in results.params),
        standard_errors=tuple(float(v) for v in results.bse),
        n_obs=int(results.nobs),
        r_squared=r_squared,
    )


# ============================================================================
# LOGISTIC
# ============================================================================

def find_separating_level(
    features: pd.DataFrame,
    outcome: pd.Series,
    levels: Dict[str, List[str]]
) -> Optional[Tuple[str, str]]:
    """
    First (predictor, level) whose rows all share one outcome class

    Such a level drives its coefficient (or, for the reference level, the
    intercept) to infinity: quasi-complete separation.
    """
    for col, col_levels in levels.items():
        if len(col_levels) < 2:
            continue
        values = as_levels(features[col])
        for level in col_levels:
            classes = outcome[values == level].unique()
            if len(classes) == 1:
                return col, level
    return None


def _binary_outcome(outcome) -> pd.Series:
    y = pd.Series(outcome).reset_index(drop=True)
    try:
        y = y.astype('Float64')
    except (TypeError, ValueError) as e:
        raise ValueError(f'outcome must be 0/1 or boolean: {e}') from e

    observed = set(y.dropna().unique().tolist())
    if not observed <= {0.0, 1.0}:
        raise ValueError(f'outcome must be 0/1, found {sorted(observed)[:5]}')
    return y


def fit_logistic(
    features: pd.DataFrame,
    outcome,
    predictor_columns: Optional[Sequence[str]] = None,
    max_iter: int = 100,
    tol: float = 1e-8,
    allow_separation: bool = False,
    verbose: bool = False
) -> FittedModel:
    """
    Fit a logistic regression of a binary outcome on categorical predictors

    Args:
        features: Table of categorical predictors
        outcome: 0/1 or boolean values aligned (by position) with features;
            rows with a missing outcome are excluded
        predictor_columns: Columns of `features` to use (default: all)
        max_iter: IRLS iteration cap
        tol: Deviance change tolerance
        allow_separation: Return separated fits instead of raising (see module doc)
        verbose: Print fit summary

    Returns:
        FittedModel (coefficients on the log-odds scale)

    Raises:
        InsufficientData: No usable rows, a single outcome class, or a
            rank-deficient design
        NonConvergence: max_iter reached without meeting tol
        SeparationDetected: Perfect separation (unless allow_separation)
    """
    features = pd.DataFrame(features)
    predictors = list(predictor_columns) if predictor_columns is not None else list(features.columns)
    require_columns(features, predictors, context='fit_logistic')

    y = _binary_outcome(outcome)
    if len(y) != len(features):
        raise ValueError(f'features and outcome lengths differ: {len(features)} vs {len(y)}')

    feats = features[predictors].reset_index(drop=True)
    keep = y.notna().to_numpy()
    if not keep.all():
        if verbose:
            print(f'  ⚠️  Excluding {(~keep).sum():,} rows with missing outcome')
        feats = feats[keep].reset_index(drop=True)
        y = y[keep].reset_index(drop=True)

    if len(y) == 0:
        raise InsufficientData('No rows with an observed outcome')

    y = y.astype(float)
    if y.nunique() < 2:
        raise InsufficientData(f'Outcome has a single class ({y.iloc[0]:g}) across {len(y)} rows')

    levels = fit_levels(feats, predictors)

    separated = False
    separating = find_separating_level(feats, y, levels)
    if separating is not None:
        if not allow_separation:
            raise SeparationDetected(*separating)
        separated = True

    X = encode_dummies(feats, levels)
    X.insert(0, INTERCEPT, 1.0)

    if np.linalg.matrix_rank(X.to_numpy()) < X.shape[1]:
        raise InsufficientData(
            f'Design matrix is rank deficient ({X.shape[1]} columns, {len(X)} rows); '
            f'predictors are collinear or too sparse'
        )

    model = sm.GLM(y.to_numpy(), X, family=sm.families.Binomial())

    with warnings.catch_warnings(record=True) as caught:
        warnings.simplefilter('always')
        try:
            results = model.fit(method='IRLS', maxiter=max_iter, tol=tol)
        except PerfectSeparationError as e:
            raise SeparationDetected(detail=str(e)) from e

    if any(issubclass(w.category, PerfectSeparationWarning) for w in caught):
        separated = True

    mu = np.asarray(results.fittedvalues, dtype=float)
    if np.any(mu < SEPARATION_EPS) or np.any(mu > 1.0 - SEPARATION_EPS):
        separated = True

    if separated and not allow_separation:
        raise SeparationDetected(detail='fitted probabilities reached 0 or 1')

    history = getattr(results, 'fit_history', {}) or {}
    iterations = int(history.get('iteration', max_iter))
    converged = bool(getattr(results, 'converged', True))

    if not converged and not separated:
        deviance = history.get('deviance', [])
        last_change = None
        if len(deviance) >= 2 and np.isfinite(deviance[-2]):
            last_change = float(abs(deviance[-1] - deviance[-2]))
        raise NonConvergence(iterations, tol, last_change)

    fitted = FittedModel(
        model_type=LOGISTIC,
        predictor_names=tuple(X.columns),
        coefficients=tuple(float(v) for v in results.params),
        standard_errors=tuple(float(v) for v in results.bse),
        n_obs=int(results.nobs),
        log_likelihood=float(results.llf),
        iterations=iterations,
        converged=converged,
        separated=separated,
        predictor_columns=tuple(predictors),
        levels=levels,
    )

    if verbose:
        print_model(fitted)

    return fitted


# ============================================================================
# HELPERS
# ============================================================================

def probability_bins(probabilities, bins: int = 10) -> pd.Series:
    """Number of predictions in each of `bins` equal-width probability bins"""
    edges = np.linspace(0.0, 1.0, bins + 1)
    binned = pd.cut(np.asarray(probabilities, dtype=float), bins=edges, include_lowest=True)
    return pd.Series(binned).value_counts(sort=False)


def print_model(model: FittedModel):
    """Print a coefficient table"""
    print(f'\n{"="*70}')
    print(f'MODEL: {model.model_type} regression ({model.n_obs:,} observations)')
    print(f'{"="*70}')
    print(f'  {"Term":<40} {"Estimate":>12} {"Std. Error":>12}')
    for name, coef, se in zip(model.predictor_names, model.coefficients, model.standard_errors):
        print(f'  {name:<40} {coef:>12.4f} {se:>12.4f}')

    if model.r_squared is not None:
        print(f'\n  R²: {model.r_squared:.4f}')
    if model.log_likelihood is not None:
        print(f'\n  Log-likelihood: {model.log_likelihood:.2f}')
        print(f'  IRLS iterations: {model.iterations}')
    if model.separated:
        print('  ⚠️  Separation detected: coefficients and standard errors are inflated')
