"""Security maturity self-assessment scoring engine."""

__version__ = "1.0.0"
