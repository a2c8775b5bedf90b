# src/ttest_tools/core/_noncentral.py

import logging
from typing import Callable, Optional, Sequence, Tuple

import numpy as np
from scipy import optimize
from scipy.stats import nct
from scipy.stats import t as _t_dist

from ..config import CI_MAX_EXPAND, CI_MAX_ITER, CI_TOLERANCE, CI_XATOL, CONF_LEVEL
from ..exceptions import EffectSizeCIConvergenceError

logger = logging.getLogger(__name__)


def tail_match_objective(
    bounds: Sequence[float],
    observed_t: float,
    df: float,
    n: int,
    tail: float = 0.025
) -> float:
    """
    Squared distance of both noncentral-t tails from their target.

    The lower bound's noncentrality should leave ``tail`` probability above
    the observed t, the upper bound's should leave ``tail`` below it.

    :param bounds: candidate (lower, upper) on the d scale.
    :param observed_t: t-statistic of the paired test.
    :param df: degrees of freedom (n - 1).
    :param n: number of pairs; the noncentrality is ``bound * sqrt(n)``.
    :param tail: target probability in each tail.
    """
    lower, upper = bounds
    root_n = np.sqrt(n)
    p_upper = nct.sf(observed_t, df, lower * root_n)
    p_lower = nct.cdf(observed_t, df, upper * root_n)
    return float((p_upper - tail) ** 2 + (p_lower - tail) ** 2)


def _bracket(
    f: Callable[[float], float],
    x0: float,
    max_expand: int = CI_MAX_EXPAND
) -> Optional[Tuple[float, float]]:
    """
    Widen [x0 - step, x0 + step], doubling the step, until ``f`` changes sign.
    """
    step = 1.0
    for _ in range(max_expand):
        a, b = x0 - step, x0 + step
        fa, fb = f(a), f(b)
        if np.isfinite(fa) and np.isfinite(fb) and fa * fb <= 0.0:
            return a, b
        step *= 2.0
    return None


def _tail_root(
    f: Callable[[float], float],
    x0: float,
    max_iter: int
) -> Tuple[float, bool]:
    """
    Root of a monotone tail-probability gap near ``x0``.

    :return: (root, converged); the root is ``x0`` when no bracket was found.
    """
    bracket = _bracket(f, x0)
    if bracket is None:
        return x0, False
    root, info = optimize.brentq(
        f, *bracket, xtol=CI_XATOL, maxiter=max_iter, full_output=True, disp=False
    )
    return float(root), bool(info.converged)


def solve_noncentral_tail_match(
    observed_t: float,
    df: float,
    n: int,
    start: Optional[Tuple[float, float]] = None,
    conf_level: float = CONF_LEVEL,
    tol: float = CI_TOLERANCE,
    max_iter: int = CI_MAX_ITER,
) -> Tuple[float, float]:
    """
    Confidence bounds for a standardized mean from a noncentral t.

    ``tail_match_objective`` is a sum of one term per bound, so each bound is
    the root of its own tail gap: P(T > t; lower·√n) = tail, and
    P(T <= t; upper·√n) = tail. Both gaps are monotone in the bound, so each
    root is bracketed by widening outward from its start and refined with
    Brent's method. Without ``start``, the search begins at
    (t ± t_crit) / sqrt(n), i.e. the mean-difference CI expressed in SD units.

    :return: (lower, upper) on the d scale.
    :raises EffectSizeCIConvergenceError: if either root is not found within
        ``max_iter`` iterations or the objective is not below ``tol``.
    """
    tail = (1.0 - conf_level) / 2.0
    if start is None:
        t_crit = float(_t_dist.ppf(1.0 - tail, df))
        start = ((observed_t - t_crit) / np.sqrt(n), (observed_t + t_crit) / np.sqrt(n))
    root_n = np.sqrt(n)

    lower, lower_ok = _tail_root(
        lambda d: nct.sf(observed_t, df, d * root_n) - tail, float(start[0]), max_iter
    )
    upper, upper_ok = _tail_root(
        lambda d: nct.cdf(observed_t, df, d * root_n) - tail, float(start[1]), max_iter
    )
    objective = tail_match_objective((lower, upper), observed_t, df, n, tail)
    logger.debug(
        "noncentral tail match: t=%.4f df=%s converged=(%s, %s) objective=%.3g bounds=(%.4f, %.4f)",
        observed_t, df, lower_ok, upper_ok, objective, lower, upper,
    )

    if not (lower_ok and upper_ok) or not np.isfinite(objective) or objective >= tol:
        raise EffectSizeCIConvergenceError(
            f"Cohen's d interval did not converge within {max_iter} iterations "
            f"(objective {objective:.3g}, tolerance {tol:g})",
            lower=lower,
            upper=upper,
            objective=objective,
        )
    return lower, upper
