# src/ttest_tools/core/_estimates.py

from typing import Hashable, List, Optional, Tuple

import jax.numpy as jnp
import numpy as np

from ..results import (
    CleanedSample,
    DiagnosticRecord,
    EstimateRow,
    EstimatesTable,
    TestResult,
)
from ._effect_sizes import analytic_ci

DIFFERENCE_LABEL = "Difference"


class EstimatesTableBuilder:
    """
    Collects the two group rows and the difference row, then freezes them.

    Rows can only be appended; ``build`` fails unless both groups and the
    difference are present.
    """

    def __init__(self, conf_level: float):
        self.conf_level = conf_level
        self._groups: List[EstimateRow] = []
        self._difference: Optional[EstimateRow] = None

    def add_group(self, group: Hashable, mean: float, lower: float, upper: float) -> "EstimatesTableBuilder":
        if len(self._groups) == 2:
            raise ValueError("An estimates table holds exactly two groups")
        if any(row.group == group for row in self._groups):
            raise ValueError(f"Group '{group}' already added")
        self._groups.append(EstimateRow(group, float(mean), float(lower), float(upper)))
        return self

    def add_difference(self, mean: float, lower: float, upper: float) -> "EstimatesTableBuilder":
        if self._difference is not None:
            raise ValueError("Difference row already added")
        self._difference = EstimateRow(DIFFERENCE_LABEL, float(mean), float(lower), float(upper))
        return self

    def build(self) -> EstimatesTable:
        if len(self._groups) != 2 or self._difference is None:
            raise ValueError("Need two group rows and a difference row")
        return EstimatesTable(rows=(*self._groups, self._difference), conf_level=self.conf_level)


def mean_ci(values: np.ndarray, conf_level: float) -> Tuple[float, float, float]:
    """
    Mean of one group with its one‐sample t interval.

    :return: (mean, lower, upper)
    """
    x = jnp.asarray(values)
    n = x.size
    mean = float(jnp.mean(x))
    se = float(jnp.std(x, ddof=1) / jnp.sqrt(n))
    lower, upper = analytic_ci(mean, se, alpha=1.0 - conf_level, df=n - 1)
    return mean, lower, upper


def build_table(
    sample: CleanedSample,
    test_result: TestResult,
    conf_level: Optional[float] = None,
) -> EstimatesTable:
    """
    Rows: first group, second group, then the signed mean difference with the
    test's own interval.
    """
    if conf_level is None:
        conf_level = test_result.conf_level
    builder = EstimatesTableBuilder(conf_level)
    for code, label in enumerate(sample.levels):
        builder.add_group(label, *mean_ci(sample.group(code), conf_level))
    builder.add_difference(test_result.estimate, test_result.ci_lower, test_result.ci_upper)
    return builder.build()


def compute_diagnostics(
    sample: CleanedSample,
    table: EstimatesTable
) -> Tuple[DiagnosticRecord, ...]:
    """
    Fitted value (group mean), residual and absolute residual per observation.
    """
    fitted_by_code = [table.mean_of(label) for label in sample.levels]
    records = []
    for value, code in zip(sample.values.tolist(), sample.codes.tolist()):
        fitted = fitted_by_code[code]
        resid = value - fitted
        records.append(DiagnosticRecord(
            value=value,
            group=sample.levels[code],
            fitted=fitted,
            residual=resid,
            abs_residual=abs(resid),
        ))
    return tuple(records)
