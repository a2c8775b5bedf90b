# src/ttest_tools/results.py

from __future__ import annotations
from dataclasses import dataclass, asdict
from enum import Enum
from typing import Hashable, Optional, Tuple

import numpy as np
import pandas as pd

from .config import P_REPORT_FLOOR, REPORT_DIGITS


class Design(str, Enum):
    """
    How the ``(y, x)`` inputs are laid out.

    - ``GROUPED``: ``y`` holds the scores, ``x`` the group label of each score.
    - ``TWO_SAMPLES``: ``x`` holds the scores of group 1, ``y`` those of group 2.
    - ``AUTO``: choose one of the above from the number of distinct ``x`` values.
    """
    AUTO = "auto"
    GROUPED = "grouped"
    TWO_SAMPLES = "two_samples"


def _trim(value: float, digits: int) -> str:
    # round, then drop trailing zeros: 4.00 -> "4", 2.50 -> "2.5"
    text = f"{value:.{digits}f}"
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return "0" if text == "-0" else text


@dataclass(frozen=True, eq=False)
class CleanedSample:
    """
    Two-group data after design inference and missing-value removal.

    ``codes`` is 0 for ``levels[0]`` and 1 for ``levels[1]``; observations keep
    their input order, which is also the pairing order for related designs.
    """
    values: np.ndarray
    codes: np.ndarray
    levels: Tuple[Hashable, Hashable]
    design: Design
    n_dropped: int = 0

    def __post_init__(self):
        # read-only views; the caller's arrays stay writeable
        for name in ("values", "codes"):
            view = np.asarray(getattr(self, name)).view()
            view.setflags(write=False)
            object.__setattr__(self, name, view)

    def __len__(self) -> int:
        return int(self.values.size)

    def group(self, code: int) -> np.ndarray:
        """Values of group ``code`` (0 or 1), in input order."""
        return self.values[self.codes == code]

    @property
    def sizes(self) -> Tuple[int, int]:
        return int(np.sum(self.codes == 0)), int(np.sum(self.codes == 1))

    @property
    def labels(self) -> list:
        """Original group label of every observation."""
        return [self.levels[c] for c in self.codes]

    def to_dataframe(self) -> pd.DataFrame:
        return pd.DataFrame({"y": np.asarray(self.values), "x": self.labels})


@dataclass(frozen=True)
class TestResult:
    """
    Container for the mean-difference test.

    ``estimate`` is the mean of the first level minus the mean of the second
    (for paired data, the mean of those within-pair differences).
    """
    __test__ = False  # keep pytest from collecting this class

    paired: bool
    equal_var: bool
    estimate: float
    ci_lower: float
    ci_upper: float
    statistic: float
    df: float
    p_value: float
    se: float
    conf_level: float
    group_means: Tuple[float, float]


@dataclass(frozen=True)
class EffectSizeResult:
    """
    Cohen's d with its confidence interval.

    ``se`` is only defined for independent designs, where the interval is
    analytic; paired intervals come from the noncentral t and carry no SE.
    """
    d: float
    lower: float
    upper: float
    se: Optional[float]
    paired: bool
    conf_level: float

    def as_tuple(self) -> Tuple[float, float, float]:
        return self.d, self.lower, self.upper


@dataclass(frozen=True)
class EstimateRow:
    group: Hashable
    mean: float
    lower: float
    upper: float


@dataclass(frozen=True)
class EstimatesTable:
    """
    Group means and the mean difference, each with a confidence interval.

    Rows are always ordered: first level, second level, ``"Difference"``.
    """
    rows: Tuple[EstimateRow, ...]
    conf_level: float

    def __iter__(self):
        return iter(self.rows)

    def __len__(self) -> int:
        return len(self.rows)

    def mean_of(self, group: Hashable) -> float:
        for row in self.rows:
            if row.group == group:
                return row.mean
        raise KeyError(group)

    @property
    def difference(self) -> EstimateRow:
        return self.rows[-1]

    def to_dataframe(self) -> pd.DataFrame:
        pct = _trim(self.conf_level * 100, 4)
        return pd.DataFrame(
            [(r.group, r.mean, r.lower, r.upper) for r in self.rows],
            columns=["Group", "Mean", f"Lower {pct}% CI", f"Upper {pct}% CI"],
        )


@dataclass(frozen=True)
class DiagnosticRecord:
    value: float
    group: Hashable
    fitted: float
    residual: float
    abs_residual: float


@dataclass(frozen=True, eq=False)
class TTestResult:
    """
    Container for a full two-group analysis.
    """
    sample: CleanedSample
    test: TestResult
    cohens_d: EffectSizeResult
    estimates: EstimatesTable
    diagnostics: Tuple[DiagnosticRecord, ...]
    difference_scores: Optional[np.ndarray] = None

    @property
    def report(self) -> str:
        """APA-style significance line, e.g. ``t(4) = -3.67, p = 0.021``."""
        t = self.test
        if t.p_value < P_REPORT_FLOOR:
            p_text = f"p < {P_REPORT_FLOOR}"
        else:
            p_text = f"p = {_trim(t.p_value, 3)}"
        return (
            f"t({_trim(t.df, REPORT_DIGITS)}) = "
            f"{_trim(t.statistic, REPORT_DIGITS)}, {p_text}"
        )

    def summary(self) -> str:
        """
        Return a concise multi-line summary: effect size, estimates, then significance.
        """
        es = self.cohens_d
        lines = [
            f"Design: {self.sample.design.value}{' (paired)' if self.test.paired else ''}",
            f"Rows dropped: {self.sample.n_dropped}",
            f"Cohen's d: {es.d:.3f} ({es.lower:.2f}, {es.upper:.2f})",
            "",
            "Parameter Estimates:",
            self.estimates.to_dataframe().to_string(index=False),
            "",
            self.report,
        ]
        return "\n".join(lines)

    def to_dataframe(self) -> pd.DataFrame:
        """
        Cleaned data with fitted values and residuals, one row per observation.
        """
        df = pd.DataFrame([asdict(r) for r in self.diagnostics])
        df = df.rename(columns={
            "value": "y",
            "group": "x",
            "residual": "residuals",
            "abs_residual": "abs_residuals",
        })
        return df[["y", "x", "fitted", "residuals", "abs_residuals"]]
