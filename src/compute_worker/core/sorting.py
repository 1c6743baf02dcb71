"""
排序算法实现

所有函数都返回新的列表，不修改输入
"""

from typing import Any, Callable, Dict, List, Sequence


def quick_sort(items: Sequence[Any]) -> List[Any]:
    """快速排序：中间元素为基准，三路划分（小于 / 等于 / 大于）"""
    if len(items) <= 1:
        return list(items)

    pivot = items[len(items) // 2]
    less, equal, greater = [], [], []

    for element in items:
        if element < pivot:
            less.append(element)
        elif element > pivot:
            greater.append(element)
        else:
            equal.append(element)

    return quick_sort(less) + equal + quick_sort(greater)


def merge_sort(items: Sequence[Any]) -> List[Any]:
    """归并排序：自顶向下二分，递归排序后线性合并"""
    if len(items) <= 1:
        return list(items)

    mid = len(items) // 2
    return _merge(merge_sort(items[:mid]), merge_sort(items[mid:]))


def _merge(left: List[Any], right: List[Any]) -> List[Any]:
    result = []
    i = j = 0

    while i < len(left) and j < len(right):
        # 相等时取左半部分，保证稳定
        if right[j] < left[i]:
            result.append(right[j])
            j += 1
        else:
            result.append(left[i])
            i += 1

    result.extend(left[i:])
    result.extend(right[j:])
    return result


def bubble_sort(items: Sequence[Any]) -> List[Any]:
    """冒泡排序：n-1 轮相邻交换，内层上界逐轮递减"""
    arr = list(items)
    n = len(arr)
    for i in range(n - 1):
        for j in range(n - i - 1):
            if arr[j] > arr[j + 1]:
                arr[j], arr[j + 1] = arr[j + 1], arr[j]
    return arr


def native_sort(items: Sequence[Any]) -> List[Any]:
    return sorted(items)


SORTERS: Dict[str, Callable[[Sequence[Any]], List[Any]]] = {
    "quick": quick_sort,
    "merge": merge_sort,
    "bubble": bubble_sort,
}


def get_sorter(algorithm: str) -> Callable[[Sequence[Any]], List[Any]]:
    """按名称获取排序函数，未知名称回退到内置排序"""
    return SORTERS.get(algorithm, native_sort)
