"""
Model Fitting Errors

Raised by ml_engineering.models.regression when a fit is degenerate.
All derive from PipelineError so the runner can abort on any of them.
"""

from typing import Optional

from data_engineering.utils.errors import PipelineError


class ModelError(PipelineError):
    """Base class for regression fitting failures"""


class InsufficientData(ModelError):
    """Not enough (distinct) observations to identify the model"""


class NonConvergence(ModelError):
    """IRLS hit the iteration cap before the tolerance was met"""

    def __init__(self, iterations: int, tol: float, last_change: Optional[float] = None):
        self.iterations = iterations
        self.tol = tol
        self.last_change = last_change

        message = f'Logistic fit did not converge after {iterations} iterations (tol={tol:g})'
        if last_change is not None:
            message += f'; last deviance change {last_change:.3g}'
        super().__init__(message)


class SeparationDetected(ModelError):
    """A predictor (or combination) perfectly separates the outcome classes"""

    def __init__(self, predictor: Optional[str] = None, level=None, detail: Optional[str] = None):
        self.predictor = predictor
        self.level = level

        if predictor is not None:
            message = f'Perfect separation: {predictor}={level!r} has a single outcome class'
        else:
            message = 'Perfect separation detected'
        if detail:
            message += f' ({detail})'
        super().__init__(message)
