# src/ttest_tools/__init__.py

"""
ttest_tools
===========

Two-group mean comparison that puts estimation first. Features:

- Independent (Welch or pooled) and paired t-tests with the mean-difference CI
- Cohen's d with an analytic CI (independent) or a noncentral-t CI (paired)
- Group means with one-sample CIs, collected into an estimates table
- Fitted values and residuals per observation for diagnostic plots
- Explicit or inferred input layout (scores + labels, or two score vectors)
"""

__version__ = "0.1.0"

# High-level API
from .api import ttest

# Result classes
from .results import (
    Design,
    CleanedSample,
    TestResult,
    EffectSizeResult,
    EstimateRow,
    EstimatesTable,
    DiagnosticRecord,
    TTestResult,
)

# Errors
from .exceptions import (
    TTestError,
    LengthMismatchError,
    DegenerateGroupsError,
    InsufficientDataError,
    DegenerateVarianceError,
    EffectSizeCIConvergenceError,
)

__all__ = [
    "ttest",
    "Design",
    "CleanedSample",
    "TestResult",
    "EffectSizeResult",
    "EstimateRow",
    "EstimatesTable",
    "DiagnosticRecord",
    "TTestResult",
    "TTestError",
    "LengthMismatchError",
    "DegenerateGroupsError",
    "InsufficientDataError",
    "DegenerateVarianceError",
    "EffectSizeCIConvergenceError",
]
