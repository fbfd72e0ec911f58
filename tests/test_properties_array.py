# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

import pytest

from qdispatch_lib.core.error import QDUsageError
from qdispatch_lib.properties.array import ArrayRange


def test_array_range_from_str_range():
    array = ArrayRange.fromStr("JOB=1:4")

    assert array == ArrayRange("JOB", 1, 4)
    assert len(array) == 4
    assert list(array) == [1, 2, 3, 4]
    assert str(array) == "JOB=1:4"


def test_array_range_from_str_single_index():
    array = ArrayRange.fromStr("TASK_ID=7")

    assert array == ArrayRange("TASK_ID", 7, 7)
    assert len(array) == 1
    assert list(array) == [7]


@pytest.mark.parametrize(
    "token", ["exp/log/train.log", "JOB=1:n", "-q", "1JOB=1:3", "JOB=a", "JOB="]
)
def test_array_range_from_str_not_a_range(token):
    assert ArrayRange.fromStr(token) is None


def test_array_range_start_larger_than_end_is_rejected():
    with pytest.raises(QDUsageError, match="start is larger than end"):
        ArrayRange.fromStr("JOB=5:2")


@pytest.mark.parametrize("start,end", [(1, 1), (0, 9), (3, 10)])
def test_array_range_length_matches_number_of_indices(start, end):
    array = ArrayRange("JOB", start, end)

    assert len(array) == end - start + 1
    assert len(list(array)) == len(array)


@pytest.mark.parametrize(
    "token,expected",
    [
        ("JOB=1:n", True),
        ("JOB=1:4", True),
        ("x=y:z", True),
        ("exp/log/a.log", False),
        ("JOB=4", False),
    ],
)
def test_array_range_looks_like_range(token, expected):
    assert ArrayRange.looksLikeRange(token) is expected
