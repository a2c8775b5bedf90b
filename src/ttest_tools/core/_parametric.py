from typing import Tuple

import jax
import jax.numpy as jnp
import jax.scipy.special as spec
from jax import lax
import numpy as np

from ..config import CONF_LEVEL
from ..exceptions import DegenerateVarianceError, InsufficientDataError
from ..results import CleanedSample, TestResult
from ._data_prep import _is_constant, paired_differences
from ._effect_sizes import analytic_ci


@jax.jit
def t_two_sided_p(t: jnp.ndarray, v: jnp.ndarray) -> jnp.ndarray:
    """
    Two‐sided Student‐t p-value P(|T| >= |t|), via the regularized incomplete beta.

    :param t: t‐statistic(s).
    :param v: degrees of freedom (float or array of floats).
    :return: two‐sided tail probability.
    """
    z = v / (v + t**2)
    return spec.betainc(v * 0.5, 0.5, z)


@jax.jit
def _t_test(
    measure: jnp.ndarray,
    labels: jnp.ndarray,
    equal_var: bool = False
) -> Tuple[jnp.ndarray, ...]:
    """
    Two‐sample t‐test (independent groups) using mask‐based sums
    and an explicit t‐distribution CDF via the regularized incomplete beta.

    :param measure: 1D array of all observations.
    :param labels: 1D integer array, same length, values 0 or 1 for group.
    :param equal_var: True for Student’s t (pooled), False for Welch’s t.
    :return: (mean difference 0 - 1, SE, df, t_statistic, two‐sided p_value,
        mean of group 0, mean of group 1).
    """
    # Boolean masks
    mask0 = labels == 0
    mask1 = labels == 1

    # Sample sizes
    n0 = jnp.sum(mask0)
    n1 = jnp.sum(mask1)

    # Means
    mean0 = jnp.sum(measure * mask0) / n0
    mean1 = jnp.sum(measure * mask1) / n1

    # Unbiased variances (ddof=1)
    var0 = jnp.sum(mask0 * (measure - mean0) ** 2) / (n0 - 1)
    var1 = jnp.sum(mask1 * (measure - mean1) ** 2) / (n1 - 1)

    diff = mean0 - mean1

    # Pooled variance SE & float df
    pooled_var = ((n0 - 1) * var0 + (n1 - 1) * var1) / (n0 + n1 - 2)
    se_pooled = jnp.sqrt(pooled_var * (1.0 / n0 + 1.0 / n1))
    df_pooled = jnp.array(n0 + n1 - 2, dtype=measure.dtype)

    # Welch SE & df
    v0n = var0 / n0
    v1n = var1 / n1
    se_welch = jnp.sqrt(v0n + v1n)
    df_num = (v0n + v1n) ** 2
    df_den = (v0n ** 2) / (n0 - 1) + (v1n ** 2) / (n1 - 1)
    df_welch = df_num / df_den

    se, df = lax.cond(
        equal_var,
        lambda _: (se_pooled, df_pooled),
        lambda _: (se_welch, df_welch),
        operand=None,
    )

    t_stat = diff / se
    p_val = t_two_sided_p(t_stat, df)

    return diff, se, df, t_stat, p_val, mean0, mean1


@jax.jit
def _one_sample_t_test(d: jnp.ndarray) -> Tuple[jnp.ndarray, ...]:
    """
    One‐sample t‐test of mean(d) == 0, used on within-pair differences.

    :return: (mean, SE, df, t_statistic, two‐sided p_value).
    """
    n = d.size
    mean = jnp.mean(d)
    se = jnp.std(d, ddof=1) / jnp.sqrt(n)
    df = jnp.array(n - 1, dtype=d.dtype)
    t_stat = mean / se
    p_val = t_two_sided_p(t_stat, df)
    return mean, se, df, t_stat, p_val


def _check_conf_level(conf_level: float) -> None:
    if not 0.0 < conf_level < 1.0:
        raise ValueError(f"conf_level must be in (0, 1), got {conf_level}")


def _check_group_sizes(sample: CleanedSample) -> None:
    for label, n in zip(sample.levels, sample.sizes):
        if n < 2:
            raise InsufficientDataError(
                f"Group '{label}' has {n} observation(s); at least 2 are required"
            )


def run_test(
    sample: CleanedSample,
    paired: bool = False,
    equal_var: bool = False,
    conf_level: float = CONF_LEVEL,
) -> TestResult:
    """
    Two-sided mean-difference test on a cleaned two-group sample.

    Independent groups use Welch's test unless ``equal_var`` is set; paired
    groups run a one-sample test on the first-minus-second differences.
    The estimate is always oriented first level minus second level.

    :raises InsufficientDataError: a group with < 2 observations, or a
        constant group in the independent branch.
    :raises DegenerateVarianceError: constant paired differences.
    :raises DegenerateGroupsError: paired groups of unequal size.
    """
    _check_conf_level(conf_level)
    _check_group_sizes(sample)
    alpha = 1.0 - conf_level

    if paired:
        diffs = paired_differences(sample)
        if _is_constant(diffs):
            raise DegenerateVarianceError(
                "Paired differences have zero variance; Cohen's d is undefined"
            )
        est, se, df, t_stat, p_val = (
            float(v) for v in _one_sample_t_test(jnp.asarray(diffs))
        )
        means = (float(np.mean(sample.group(0))), float(np.mean(sample.group(1))))
    else:
        for code, label in enumerate(sample.levels):
            if _is_constant(sample.group(code)):
                raise InsufficientDataError(
                    f"Group '{label}' has zero variance; the t-test is undefined"
                )
        est, se, df, t_stat, p_val, m0, m1 = (
            float(v) for v in _t_test(
                jnp.asarray(sample.values), jnp.asarray(sample.codes), equal_var=equal_var
            )
        )
        means = (m0, m1)

    ci_lower, ci_upper = analytic_ci(est, se, alpha=alpha, df=df)
    return TestResult(
        paired=bool(paired),
        equal_var=bool(equal_var) and not paired,
        estimate=est,
        ci_lower=ci_lower,
        ci_upper=ci_upper,
        statistic=t_stat,
        df=df,
        p_value=p_val,
        se=se,
        conf_level=conf_level,
        group_means=means,
    )
