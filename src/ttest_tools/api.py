# src/ttest_tools/api.py

import logging
from typing import Any, Literal, Sequence, Union

from .config import CONF_LEVEL
from .core._data_prep import infer_design, paired_differences
from .core._parametric import run_test
from .core._effect_sizes import estimate_effect_size
from .core._estimates import build_table, compute_diagnostics
from .results import Design, TTestResult

logger = logging.getLogger(__name__)

_Design = Literal["auto", "grouped", "two_samples"]


def ttest(
    y: Sequence[Any],
    x: Sequence[Any],
    related: bool = False,
    design: Union[_Design, Design] = "auto",
    equal_var: bool = False,
    conf_level: float = CONF_LEVEL,
) -> TTestResult:
    """
    Compare two groups, reporting estimates before significance.

    :param y: the scores, or the scores of group 2 when ``design="two_samples"``.
    :param x: the group label of each score, or the scores of group 1.
    :param related: True for paired / repeated-measures data.
    :param design: "grouped", "two_samples", or "auto" to infer it from the
        number of distinct values in ``x`` (a warning says when two score
        vectors are assumed).
    :param equal_var: pool the variances (Student) instead of Welch's test.
        Cohen's d always uses the pooled SD.
    :param conf_level: confidence level of every interval.
    :return: TTestResult with Cohen's d, the estimates table, the test,
        the cleaned data and per-observation residuals.
    :raises ValueError: for invalid options; the ``ttest_tools.exceptions``
        errors (all ValueError subclasses) for unusable data.
    """
    # 1. resolve the layout & drop NA
    sample, paired = infer_design(y, x, design=design, paired=related)
    # 2. mean-difference test
    test = run_test(sample, paired=paired, equal_var=equal_var, conf_level=conf_level)
    # 3. Cohen's d with its CI
    effect = estimate_effect_size(sample, test, paired=paired, conf_level=conf_level)
    # 4. estimates table & residuals
    table = build_table(sample, test, conf_level=conf_level)
    diagnostics = compute_diagnostics(sample, table)

    logger.debug(
        "ttest: design=%s paired=%s n=%d dropped=%d d=%.4f p=%.4g",
        sample.design.value, paired, len(sample), sample.n_dropped, effect.d, test.p_value,
    )
    return TTestResult(
        sample=sample,
        test=test,
        cohens_d=effect,
        estimates=table,
        diagnostics=diagnostics,
        difference_scores=paired_differences(sample) if paired else None,
    )
