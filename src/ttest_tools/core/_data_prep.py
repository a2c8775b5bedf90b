# src/ttest_tools/core/_data_prep.py

import logging
import warnings
from typing import Any, List, Sequence, Tuple, Union

import numpy as np
import pandas as pd

from ..exceptions import DegenerateGroupsError, LengthMismatchError
from ..results import CleanedSample, Design

logger = logging.getLogger(__name__)

_NUMERIC_KINDS = {"integer", "floating", "mixed-integer-float", "decimal"}


def _as_series(values: Sequence[Any], name: str) -> pd.Series:
    """
    Turn any 1D sequence (list, ndarray, Series) into a fresh, 0-indexed Series.
    """
    if np.ndim(values) != 1:
        raise ValueError(f"'{name}' must be a one-dimensional sequence")
    return pd.Series(list(values), name=name)


def _to_numeric(series: pd.Series) -> pd.Series:
    if pd.api.types.infer_dtype(series, skipna=True) not in _NUMERIC_KINDS | {"empty"}:
        raise ValueError(f"'{series.name}' must hold numeric scores")
    return pd.to_numeric(series).astype(float)


def resolve_design(design: Union[str, Design]) -> Design:
    try:
        return Design(design)
    except ValueError:
        raise ValueError(f"Unknown design: {design}") from None


def _validate_and_dropna(
    df: pd.DataFrame,
    columns: List[str]
) -> Tuple[pd.DataFrame, int]:
    """
    Drop rows with a missing value in any of ``columns``.

    :return: (cleaned DataFrame, number of rows removed)
    """
    initial_n = len(df)
    df_clean = df.dropna(subset=columns).reset_index(drop=True)
    n_dropped = initial_n - len(df_clean)
    if n_dropped > 0:
        warnings.warn(
            f"{n_dropped} rows removed due to missing values in columns {columns}",
            UserWarning
        )
    return df_clean, n_dropped


def _guess_design(x: pd.Series) -> Design:
    """
    Pick a design from the shape of ``x``: two distinct values mean group
    labels, more than two numeric values mean a second score vector.
    """
    n_unique = x.dropna().nunique()
    if n_unique == 2:
        return Design.GROUPED
    if n_unique > 2 and pd.api.types.infer_dtype(x, skipna=True) in _NUMERIC_KINDS:
        warnings.warn(
            f"Note: there are {n_unique} unique values for x. Assuming x holds "
            "the scores of one group and y the scores of the other. If not, "
            "make sure x has only two levels or pass design='grouped'.",
            UserWarning
        )
        return Design.TWO_SAMPLES
    return Design.GROUPED


def _stack_two_samples(
    y: pd.Series,
    x: pd.Series,
    paired: bool
) -> Tuple[pd.DataFrame, int]:
    """
    Stack two score vectors into long format: ``x`` is group 1, ``y`` group 2.

    Paired inputs lose the whole pair when either member is missing, so the
    remaining rows still line up.
    """
    g1, g2 = _to_numeric(x), _to_numeric(y)
    n_dropped = 0
    if paired:
        wide, n_dropped = _validate_and_dropna(
            pd.DataFrame({"x": g1, "y": g2}), ["x", "y"]
        )
        g1, g2 = wide["x"], wide["y"]

    long = pd.DataFrame({
        "y": pd.concat([g1, g2], ignore_index=True),
        "x": [1] * len(g1) + [2] * len(g2),
    })
    if paired:
        return long, n_dropped
    return _validate_and_dropna(long, ["y"])


def _check_group_levels(levels: Sequence[Any]) -> None:
    """
    Ensure exactly two distinct group levels are present.

    :raises DegenerateGroupsError: otherwise.
    """
    if len(levels) != 2:
        raise DegenerateGroupsError(
            f"Expected exactly 2 groups after removing missing values, "
            f"found {len(levels)}: {list(levels)}"
        )


def _encode_groups(
    df: pd.DataFrame,
    design: Design,
    n_dropped: int
) -> CleanedSample:
    """
    Integer-code the ``x`` column (sorted levels) and package the cleaned rows.
    """
    cat = pd.Categorical(df["x"])
    levels = tuple(cat.categories.tolist())
    _check_group_levels(levels)
    return CleanedSample(
        values=np.array(df["y"].to_numpy(), dtype=float),
        codes=np.array(cat.codes, dtype=np.int64),
        levels=levels,
        design=design,
        n_dropped=n_dropped,
    )


def infer_design(
    y: Sequence[Any],
    x: Sequence[Any],
    design: Union[str, Design] = Design.AUTO,
    paired: bool = False,
) -> Tuple[CleanedSample, bool]:
    """
    Resolve the input layout and clean the data.

    :param y: scores, or the scores of group 2 for ``TWO_SAMPLES``.
    :param x: group labels, or the scores of group 1 for ``TWO_SAMPLES``.
    :param design: explicit layout, or ``AUTO`` to infer it from ``x``.
    :param paired: passed through untouched; only affects how missing
        values are dropped for ``TWO_SAMPLES``.
    :return: (CleanedSample, paired)
    :raises LengthMismatchError: if ``y`` and ``x`` differ in length.
    :raises DegenerateGroupsError: if the cleaned data do not hold two groups.
    """
    y_s, x_s = _as_series(y, "y"), _as_series(x, "x")
    if len(y_s) != len(x_s):
        raise LengthMismatchError(
            f"x and y need to be the same length (got {len(x_s)} and {len(y_s)})"
        )

    mode = resolve_design(design)
    if mode is Design.AUTO:
        mode = _guess_design(x_s)
    logger.debug("design resolved to %s (paired=%s)", mode.value, paired)

    if mode is Design.TWO_SAMPLES:
        df_clean, n_dropped = _stack_two_samples(y_s, x_s, paired)
    else:
        df = pd.DataFrame({"y": _to_numeric(y_s), "x": x_s})
        df_clean, n_dropped = _validate_and_dropna(df, ["y", "x"])

    return _encode_groups(df_clean, mode, n_dropped), bool(paired)


def paired_differences(sample: CleanedSample) -> np.ndarray:
    """
    Within-pair differences (first level minus second), pairs matched by
    input order inside each level.

    :raises DegenerateGroupsError: if the two levels differ in size.
    """
    first, second = sample.group(0), sample.group(1)
    if first.size != second.size:
        raise DegenerateGroupsError(
            f"Paired design needs equal group sizes, got {first.size} "
            f"({sample.levels[0]}) and {second.size} ({sample.levels[1]})"
        )
    return first - second


def _is_constant(values: np.ndarray) -> bool:
    """
    True when ``values`` have (numerically) zero spread relative to their mean.
    """
    sd = float(np.std(values, ddof=1))
    return sd == 0.0 or sd < 10 * np.finfo(float).eps * abs(float(np.mean(values)))
