import numpy as np
import pandas as pd
import pytest

from ttest_tools import Design, DegenerateGroupsError, LengthMismatchError
from ttest_tools.results import CleanedSample
from ttest_tools.core._data_prep import (
    _validate_and_dropna,
    _is_constant,
    infer_design,
    paired_differences,
    resolve_design,
)


def test_validate_and_dropna_warns_and_drops():
    df = pd.DataFrame({
        "y": [1.0, np.nan, 3.0, 4.0],
        "x": ["A", "A", "B", None]
    })
    # rows 1 and 3 go => 2 dropped
    with pytest.warns(UserWarning) as record:
        df_clean, n_dropped = _validate_and_dropna(df, ["y", "x"])
    assert n_dropped == 2
    assert "2 rows removed" in str(record[0].message)
    assert not df_clean.isnull().any().any()
    assert list(df_clean.index) == [0, 1]


def test_grouped_design_with_two_labels():
    sample, paired = infer_design([1, 2, 3, 4, 5, 6], [1, 1, 1, 2, 2, 2])
    assert paired is False
    assert sample.design is Design.GROUPED
    assert sample.levels == (1, 2)
    assert sample.sizes == (3, 3)
    assert sample.n_dropped == 0
    assert np.allclose(sample.group(0), [1, 2, 3])
    assert np.allclose(sample.group(1), [4, 5, 6])


def test_string_labels_are_sorted_into_levels():
    sample, _ = infer_design([0.1, 0.2, 0.3, 0.4], ["Y", "X", "Y", "X"])
    assert sample.levels == ("X", "Y")
    assert list(sample.codes) == [1, 0, 1, 0]
    assert sample.labels == ["Y", "X", "Y", "X"]


def test_auto_design_stacks_two_score_vectors_with_note():
    x = [1.2, 3.4, 2.2, 5.0]
    y = [2.0, 3.1, 4.4, 6.1]
    with pytest.warns(UserWarning, match="unique values for x"):
        sample, _ = infer_design(y, x)
    assert sample.design is Design.TWO_SAMPLES
    assert len(sample) == 8
    # x is group 1, y is group 2
    assert sample.levels == (1, 2)
    assert np.allclose(sample.group(0), x)
    assert np.allclose(sample.group(1), y)


def test_explicit_two_samples_with_two_distinct_values():
    # only two distinct scores in x; AUTO would read them as labels
    sample, _ = infer_design([3.0, 4.0, 5.0], [1.0, 2.0, 1.0], design="two_samples")
    assert sample.design is Design.TWO_SAMPLES
    assert np.allclose(sample.group(0), [1.0, 2.0, 1.0])


def test_two_samples_independent_drops_single_observations():
    with pytest.warns(UserWarning, match="1 rows removed"):
        sample, _ = infer_design([2, 4, 5, 6], [1, np.nan, 3, 7], design=Design.TWO_SAMPLES)
    assert sample.n_dropped == 1
    assert sample.sizes == (3, 4)


def test_two_samples_paired_drops_whole_pair():
    with pytest.warns(UserWarning):
        sample, paired = infer_design(
            [2, 4, 5, 6, 8], [1, 2, 3, np.nan, 5], design="two_samples", paired=True
        )
    assert paired is True
    assert sample.n_dropped == 1
    assert sample.sizes == (4, 4)
    assert np.allclose(paired_differences(sample), [-1, -2, -2, -3])


def test_length_mismatch():
    with pytest.raises(LengthMismatchError):
        infer_design([1, 2, 3], [1, 2])


def test_three_labels_is_degenerate():
    with pytest.raises(DegenerateGroupsError):
        infer_design([1, 2, 3, 4], ["a", "b", "c", "a"])


def test_single_label_is_degenerate():
    with pytest.raises(DegenerateGroupsError):
        infer_design([1, 2, 3, 4], ["a"] * 4)


def test_missing_label_can_leave_one_group():
    with pytest.warns(UserWarning):
        with pytest.raises(DegenerateGroupsError):
            infer_design([1, 2, 3], ["a", "a", None])


def test_non_numeric_scores_rejected():
    with pytest.raises(ValueError):
        infer_design(["p", "q", "r", "s"], [1, 1, 2, 2])


def test_unknown_design_rejected():
    with pytest.raises(ValueError, match="Unknown design"):
        resolve_design("bogus")


def test_sample_arrays_are_read_only():
    sample, _ = infer_design([1, 2, 3, 4], [1, 1, 2, 2])
    with pytest.raises(ValueError):
        sample.values[0] = 10.0


def test_sample_leaves_caller_arrays_writeable():
    values = np.array([1.0, 2.0, 3.0, 4.0])
    codes = np.array([0, 0, 1, 1])
    sample = CleanedSample(values=values, codes=codes, levels=(1, 2), design=Design.GROUPED)
    assert values.flags.writeable and codes.flags.writeable
    values[0] = 10.0
    assert sample.values[0] == 10.0
    with pytest.raises(ValueError):
        sample.values[0] = 1.0
    with pytest.raises(ValueError):
        sample.codes[0] = 1


def test_paired_differences_need_equal_sizes():
    sample, _ = infer_design([1, 2, 3, 4, 5], [1, 1, 2, 2, 2])
    with pytest.raises(DegenerateGroupsError):
        paired_differences(sample)


def test_is_constant():
    assert _is_constant(np.array([1.0, 1.0, 1.0]))
    assert _is_constant(np.array([0.0, 0.0]))
    assert not _is_constant(np.array([1.0, 2.0]))
