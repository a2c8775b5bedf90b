# src/ttest_tools/exceptions.py

"""
Error kinds raised by the estimation pipeline.

All of them derive from ``ValueError`` so callers that already guard input
validation with ``except ValueError`` keep working.
"""

from typing import Optional


class TTestError(ValueError):
    """Base class for every error raised by ttest_tools."""


class LengthMismatchError(TTestError):
    """The two input sequences differ in length."""


class DegenerateGroupsError(TTestError):
    """The cleaned data do not hold exactly two groups (or pairs do not line up)."""


class InsufficientDataError(TTestError):
    """A group is too small, or too constant, for the requested test."""


class DegenerateVarianceError(InsufficientDataError):
    """Paired differences have zero variance, so Cohen's d is undefined."""


class EffectSizeCIConvergenceError(TTestError):
    """
    The noncentral-t solver for the paired Cohen's d interval did not converge.

    :param message: human-readable reason.
    :param d: the point estimate, which stays valid.
    :param lower: best lower bound reached by the solver.
    :param upper: best upper bound reached by the solver.
    :param objective: final value of the tail-matching objective.
    """

    def __init__(
        self,
        message: str,
        d: Optional[float] = None,
        lower: Optional[float] = None,
        upper: Optional[float] = None,
        objective: Optional[float] = None,
    ):
        super().__init__(message)
        self.d = d
        self.lower = lower
        self.upper = upper
        self.objective = objective
