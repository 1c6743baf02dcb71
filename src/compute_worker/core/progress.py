"""
进度上报约定

处理器按输入规模每隔 floor(total / 10) 个下标上报一次进度（下标 0 总会上报），
且只有在规模超过阈值时才上报。整数截断可能导致刻度不均匀，这是有意保留的行为，
宿主端可能依赖具体的刻度数量。
"""

import math


def percent(position: float, total: float) -> int:
    """floor(position / total * 100)"""
    return math.floor(position / total * 100)


def report_interval(total: int) -> int:
    return total // 10


def should_report(index: int, total: int, threshold: int) -> bool:
    """
    判断当前下标是否需要上报进度

    Args:
        index: 当前下标
        total: 输入规模
        threshold: 规模阈值，total 必须严格大于该值才上报
    """
    if total <= threshold:
        return False
    interval = report_interval(total)
    return interval > 0 and index % interval == 0
