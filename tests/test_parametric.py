import numpy as np
import pytest
import jax.numpy as jnp
from scipy import stats
from scipy.stats import ttest_ind, ttest_rel

from ttest_tools import DegenerateVarianceError, InsufficientDataError
from ttest_tools.core._data_prep import infer_design
from ttest_tools.core._parametric import (
    _one_sample_t_test,
    _t_test,
    run_test,
    t_two_sided_p,
)


def _prep_ttest_data(a: np.ndarray, b: np.ndarray):
    """
    Helper to build the flat measure + label arrays for _t_test.
    """
    measure = np.concatenate([a, b])
    labels  = np.concatenate([np.zeros(len(a), dtype=int), np.ones(len(b), dtype=int)])
    return jnp.array(measure), jnp.array(labels)


@pytest.mark.parametrize("equal_var", [True, False])
def test_t_test_against_scipy(equal_var):
    # small samples with known difference
    rng = np.random.RandomState(42)
    a = rng.normal(loc=0.0, scale=1.0, size=20)
    b = rng.normal(loc=0.5, scale=1.5, size=25)

    measure, labels = _prep_ttest_data(a, b)
    diff, se, df, t_stat, p_val, m0, m1 = (float(v) for v in _t_test(measure, labels, equal_var=equal_var))

    t_ref, p_ref = ttest_ind(a, b, equal_var=equal_var)

    assert diff == pytest.approx(a.mean() - b.mean(), rel=1e-9)
    assert m0 == pytest.approx(a.mean()) and m1 == pytest.approx(b.mean())
    assert t_stat == pytest.approx(t_ref, rel=1e-6)
    assert p_val == pytest.approx(p_ref, rel=1e-6)
    if equal_var:
        assert df == 43.0


def test_identical_samples_give_p_one():
    a = np.array([1.0, 2.0, 3.0, 4.0])
    measure, labels = _prep_ttest_data(a, a)
    _, _, _, t_stat, p_val, _, _ = _t_test(measure, labels, equal_var=True)
    assert float(t_stat) == pytest.approx(0.0, abs=1e-12)
    assert float(p_val) == pytest.approx(1.0, abs=1e-8)


def test_two_sided_p_against_scipy():
    for t_val, df in [(0.5, 3.0), (-2.1, 10.0), (4.0, 7.5), (3.0, 30.0)]:
        expected = 2 * stats.t.sf(abs(t_val), df)
        assert float(t_two_sided_p(jnp.array(t_val), jnp.array(df))) == pytest.approx(expected, rel=1e-6)


def test_one_sample_t_test_against_scipy():
    d = np.array([0.9, 0.4, 0.7, 1.2, 0.6, 1.5])
    mean, se, df, t_stat, p_val = (float(v) for v in _one_sample_t_test(jnp.array(d)))
    ref = stats.ttest_1samp(d, 0.0)
    assert mean == pytest.approx(d.mean())
    assert df == 5.0
    assert t_stat == pytest.approx(ref.statistic, rel=1e-6)
    assert p_val == pytest.approx(ref.pvalue, rel=1e-6)


def test_run_test_example_scenario():
    sample, _ = infer_design([1, 2, 3, 4, 5, 6], [1, 1, 1, 2, 2, 2])
    res = run_test(sample)
    t_ref, p_ref = ttest_ind([1, 2, 3], [4, 5, 6], equal_var=False)

    assert res.paired is False
    assert res.equal_var is False
    assert res.group_means == pytest.approx((2.0, 5.0))
    assert res.estimate == pytest.approx(-3.0)
    assert res.df == pytest.approx(4.0)
    assert res.statistic == pytest.approx(t_ref, rel=1e-6)
    assert res.p_value == pytest.approx(p_ref, rel=1e-6)
    # symmetric CI around the signed estimate
    tcrit = stats.t.ppf(0.975, 4)
    se = np.sqrt(1 / 3 + 1 / 3)
    assert res.se == pytest.approx(se)
    assert res.ci_lower == pytest.approx(-3.0 - tcrit * se)
    assert res.ci_upper == pytest.approx(-3.0 + tcrit * se)
    assert res.estimate - res.ci_lower == pytest.approx(res.ci_upper - res.estimate)


def test_run_test_pooled_matches_student():
    a = [4.1, 5.3, 6.0, 5.5, 4.9]
    b = [6.2, 7.1, 5.9, 7.8]
    sample, _ = infer_design(a + b, ["a"] * 5 + ["b"] * 4)
    res = run_test(sample, equal_var=True)
    ref = ttest_ind(a, b, equal_var=True)
    assert res.equal_var is True
    assert res.df == pytest.approx(7.0)
    assert res.statistic == pytest.approx(ref.statistic, rel=1e-6)
    assert res.p_value == pytest.approx(ref.pvalue, rel=1e-6)


def test_run_test_paired_against_scipy():
    a = np.array([5.1, 6.3, 4.8, 7.2, 5.9, 6.6])
    b = np.array([4.2, 5.9, 4.1, 6.0, 5.5, 5.1])
    sample, paired = infer_design(np.concatenate([a, b]), [1] * 6 + [2] * 6, paired=True)
    res = run_test(sample, paired=paired)
    ref = ttest_rel(a, b)

    assert res.paired is True
    assert res.estimate == pytest.approx(np.mean(a - b))
    assert res.df == pytest.approx(5.0)
    assert res.statistic == pytest.approx(ref.statistic, rel=1e-6)
    assert res.p_value == pytest.approx(ref.pvalue, rel=1e-6)
    assert res.group_means == pytest.approx((a.mean(), b.mean()))
    tcrit = stats.t.ppf(0.975, 5)
    se = np.std(a - b, ddof=1) / np.sqrt(6)
    assert res.ci_lower == pytest.approx(res.estimate - tcrit * se)


def test_two_observations_per_group_is_enough():
    sample, _ = infer_design([1.0, 2.0, 4.0, 6.0], ["a", "a", "b", "b"])
    res = run_test(sample)
    assert np.isfinite(res.statistic)
    assert 0.0 < res.p_value < 1.0


def test_one_observation_in_a_group_fails():
    sample, _ = infer_design([1.0, 4.0, 5.0, 6.0], ["a", "b", "b", "b"])
    with pytest.raises(InsufficientDataError):
        run_test(sample)


def test_constant_group_fails():
    sample, _ = infer_design([3.0, 3.0, 3.0, 4.0, 5.0, 7.0], [1, 1, 1, 2, 2, 2])
    with pytest.raises(InsufficientDataError, match="zero variance"):
        run_test(sample)


def test_constant_paired_differences_fail():
    # differences are [1, 1, 1, 1]
    y = [2, 3, 4, 5, 1, 2, 3, 4]
    sample, _ = infer_design(y, ["a"] * 4 + ["b"] * 4, paired=True)
    with pytest.raises(DegenerateVarianceError):
        run_test(sample, paired=True)


def test_conf_level_bounds():
    sample, _ = infer_design([1, 2, 3, 4, 5, 6], [1, 1, 1, 2, 2, 2])
    with pytest.raises(ValueError):
        run_test(sample, conf_level=1.0)
    narrow = run_test(sample, conf_level=0.80)
    wide = run_test(sample, conf_level=0.99)
    assert (narrow.ci_upper - narrow.ci_lower) < (wide.ci_upper - wide.ci_lower)
