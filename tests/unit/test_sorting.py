"""
排序算法单元测试
"""

import random

import pytest
from compute_worker.core.sorting import (
    bubble_sort,
    get_sorter,
    merge_sort,
    native_sort,
    quick_sort,
)

ALGORITHMS = [quick_sort, merge_sort, bubble_sort]


class Item:
    """只按 key 比较的元素，用于检查稳定性"""

    def __init__(self, key, tag):
        self.key = key
        self.tag = tag

    def __lt__(self, other):
        return self.key < other.key

    def __gt__(self, other):
        return self.key > other.key


class TestSortingAlgorithms:
    """测试三种排序算法"""

    @pytest.mark.parametrize("sort", ALGORITHMS)
    def test_matches_reference_sort(self, sort):
        """测试与内置排序结果一致"""
        rng = random.Random(42)
        data = [rng.randint(-50, 50) for _ in range(200)]
        assert sort(data) == sorted(data)

    @pytest.mark.parametrize("sort", ALGORITHMS)
    def test_idempotent(self, sort):
        """测试对已排序数组再次排序结果不变"""
        data = [5, 3, 9, 1, 1, 7]
        once = sort(data)
        assert sort(once) == once

    @pytest.mark.parametrize("sort", ALGORITHMS)
    def test_does_not_mutate_input(self, sort):
        """测试不修改输入"""
        data = [3, 1, 2]
        sort(data)
        assert data == [3, 1, 2]

    @pytest.mark.parametrize("sort", ALGORITHMS)
    def test_empty_and_single(self, sort):
        """测试空数组和单元素数组"""
        assert sort([]) == []
        assert sort([4]) == [4]

    @pytest.mark.parametrize("sort", ALGORITHMS)
    def test_floats_and_duplicates(self, sort):
        """测试浮点数与重复值"""
        assert sort([2.5, -1.0, 2.5, 0, 3]) == [-1.0, 0, 2.5, 2.5, 3]

    def test_merge_sort_is_stable(self):
        """测试归并排序在相等元素上保持原顺序"""
        items = [Item(1, "a"), Item(0, "x"), Item(1, "b"), Item(0, "y")]
        assert [item.tag for item in merge_sort(items)] == ["x", "y", "a", "b"]


class TestGetSorter:
    """测试按名称选择排序函数"""

    def test_known_algorithms(self):
        assert get_sorter("quick") is quick_sort
        assert get_sorter("merge") is merge_sort
        assert get_sorter("bubble") is bubble_sort

    def test_unknown_falls_back_to_native(self):
        """测试未知算法回退到内置排序"""
        assert get_sorter("heap") is native_sort
        assert native_sort([3, 1, 2]) == [1, 2, 3]
