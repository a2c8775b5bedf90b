# src/ttest_tools/core/_effect_sizes.py

from typing import Optional, Tuple

import jax
import jax.numpy as jnp
import jax.scipy.special as spec
import numpy as np
from scipy.stats import t as _t_dist  # for analytic t‐quantiles

from ..exceptions import (
    DegenerateVarianceError,
    EffectSizeCIConvergenceError,
    InsufficientDataError,
)
from ..results import CleanedSample, EffectSizeResult, TestResult
from ._data_prep import _is_constant, paired_differences
from ._noncentral import solve_noncentral_tail_match

# ───────────────────────────────────────────────────────────────────────────────
# Effect‐size estimators (point estimates)
# ───────────────────────────────────────────────────────────────────────────────

@jax.jit
def pooled_sd(x1: jnp.ndarray, x2: jnp.ndarray) -> jnp.ndarray:
    """
    Pooled standard deviation of two independent samples.
    """
    n1, n2 = x1.size, x2.size
    s1 = jnp.var(x1, ddof=1)
    s2 = jnp.var(x2, ddof=1)
    return jnp.sqrt(((n1 - 1)*s1 + (n2 - 1)*s2) / (n1 + n2 - 2))


@jax.jit
def cohens_d(x1: jnp.ndarray, x2: jnp.ndarray) -> jnp.ndarray:
    """
    Cohen's d for two independent samples, (mean(x1) - mean(x2)) / pooled SD.
    No small‐sample (Hedges) correction.
    """
    return (jnp.mean(x1) - jnp.mean(x2)) / pooled_sd(x1, x2)


@jax.jit
def paired_cohens_d(diffs: jnp.ndarray) -> jnp.ndarray:
    """
    Cohen's d for related samples: mean difference / SD of the differences.
    """
    return jnp.mean(diffs) / jnp.std(diffs, ddof=1)


def cohens_d_variance(d: float, n1: int, n2: int) -> float:
    """
    Large‐sample variance of an independent‐groups d.
    """
    return (n1 + n2) / (n1 * n2) + d ** 2 / (2.0 * (n1 + n2))

# ───────────────────────────────────────────────────────────────────────────────
# Confidence‐interval machinery
# ───────────────────────────────────────────────────────────────────────────────

def analytic_ci(
    est: float,
    se: float,
    alpha: float = 0.05,
    df: Optional[float] = None
) -> Tuple[float, float]:
    """
    Analytic two‐sided CI: normal if df=None, else Student’s t.
    """
    if df is None:
        # normal quantile via inverse error function
        z = float(jnp.sqrt(2.0) * spec.erfinv(1.0 - alpha))
    else:
        # Student's t quantile from SciPy
        z = float(_t_dist.ppf(1.0 - alpha/2.0, df))
    return est - z * se, est + z * se


def _independent_effect_size(
    sample: CleanedSample,
    test_result: TestResult,
    alpha: float
) -> Tuple[float, float, float, float]:
    x1, x2 = sample.group(0), sample.group(1)
    n1, n2 = x1.size, x2.size
    sp = float(pooled_sd(jnp.asarray(x1), jnp.asarray(x2)))
    if sp == 0.0:
        raise InsufficientDataError("Pooled standard deviation is zero; Cohen's d is undefined")

    d = test_result.estimate / sp
    se = float(np.sqrt(cohens_d_variance(d, n1, n2)))
    lower, upper = analytic_ci(d, se, alpha=alpha, df=n1 + n2 - 2)
    return d, lower, upper, se


def _paired_effect_size(
    sample: CleanedSample,
    test_result: TestResult,
    conf_level: float
) -> Tuple[float, float, float]:
    diffs = paired_differences(sample)
    if _is_constant(diffs):
        raise DegenerateVarianceError(
            "Paired differences have zero variance; Cohen's d is undefined"
        )
    sd = float(np.std(diffs, ddof=1))
    d = test_result.estimate / sd

    n = diffs.size
    # the difference CI on the d scale is the solver's starting point
    start = (test_result.ci_lower / sd, test_result.ci_upper / sd)
    try:
        lower, upper = solve_noncentral_tail_match(
            test_result.statistic, n - 1, n, start=start, conf_level=conf_level
        )
    except EffectSizeCIConvergenceError as err:
        err.d = d
        raise
    return d, lower, upper


def estimate_effect_size(
    sample: CleanedSample,
    test_result: TestResult,
    paired: bool = False,
    conf_level: Optional[float] = None,
) -> EffectSizeResult:
    """
    Cohen's d and its confidence interval.

    Independent designs divide the test's mean difference by the pooled SD and
    use the analytic variance of d with a t critical value on n1 + n2 - 2 df.
    Paired designs divide by the SD of the differences and find the interval
    by matching noncentral-t tail probabilities at the observed t.

    :param sample: cleaned data the test was run on.
    :param test_result: output of ``run_test`` for the same design.
    :param paired: related (True) or independent (False) design.
    :param conf_level: defaults to the level the test was run at.
    :raises DegenerateVarianceError: constant paired differences.
    :raises EffectSizeCIConvergenceError: the paired interval did not converge;
        the exception carries the point estimate as ``.d``.
    """
    if conf_level is None:
        conf_level = test_result.conf_level
    if not 0.0 < conf_level < 1.0:
        raise ValueError(f"conf_level must be in (0, 1), got {conf_level}")

    if paired:
        d, lower, upper = _paired_effect_size(sample, test_result, conf_level)
        se = None
    else:
        d, lower, upper, se = _independent_effect_size(sample, test_result, 1.0 - conf_level)

    return EffectSizeResult(
        d=float(d),
        lower=float(lower),
        upper=float(upper),
        se=se,
        paired=bool(paired),
        conf_level=conf_level,
    )
