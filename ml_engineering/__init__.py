"""
ML Engineering Module

Regression modelling for incident and epidemic summaries.

Modules:
- preprocessing: Dummy encoding of categorical predictors
- models: Linear (OLS) and logistic (IRLS) regression
- evaluation: Fit metrics
- utils: Model summary persistence
"""

__version__ = "1.0.0"
