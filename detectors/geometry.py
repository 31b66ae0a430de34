"""关键点几何工具：按索引取点、点间距离、离散度"""

import math
from typing import Iterable, List, Optional, Sequence

import numpy as np

from models.data_models import LandmarkPoint


def select_points(
    landmarks: Sequence[Optional[LandmarkPoint]], indices: Iterable[int]
) -> List[LandmarkPoint]:
    """
    按索引取关键点，缺失的点（越界或为 None）直接跳过。

    Args:
        landmarks: 按 FaceMesh 索引排列的关键点序列
        indices: 需要的关键点索引

    Returns:
        实际存在的关键点列表，保持索引顺序
    """
    points = []
    for i in indices:
        if 0 <= i < len(landmarks) and landmarks[i] is not None:
            points.append(landmarks[i])
    return points


def get_point(landmarks: Sequence[Optional[LandmarkPoint]], index: int) -> Optional[LandmarkPoint]:
    """取单个关键点，缺失时返回 None"""
    if 0 <= index < len(landmarks):
        return landmarks[index]
    return None


def distance(p1: LandmarkPoint, p2: LandmarkPoint) -> float:
    """二维欧氏距离（忽略 z）"""
    return math.dist((p1.x, p1.y), (p2.x, p2.y))


def point_dispersion(points: Sequence[LandmarkPoint]) -> float:
    """
    计算点集离散度：各点到质心距离的均方根。

    公式: sqrt(mean((x - x̄)^2 + (y - ȳ)^2))

    Returns:
        离散度，少于 2 个点时返回 0.0
    """
    if len(points) < 2:
        return 0.0

    coords = np.array([(p.x, p.y) for p in points], dtype=np.float64)
    centered = coords - coords.mean(axis=0)
    return float(np.sqrt(np.mean(np.sum(centered ** 2, axis=1))))
