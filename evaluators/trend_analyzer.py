"""疲劳趋势分析模块"""

from collections import deque

import numpy as np

from models.data_models import TREND_DECLINING, TREND_IMPROVING, TREND_STABLE


class TrendAnalyzer:
    """维护最近的疲劳分数，比较近期与之前的均值判断趋势"""

    def __init__(self, history_size: int = 30, window: int = 5, dead_band: float = 5.0):
        self.window = window
        self.dead_band = dead_band
        self._history = deque(maxlen=history_size)

    def record(self, score: float) -> None:
        self._history.append(score)

    @property
    def history(self) -> list:
        return list(self._history)

    def classify(self) -> str:
        """
        判断疲劳趋势。

        近期均值比之前低超过 dead_band 为 improving，高超过 dead_band 为 declining。

        Returns:
            "improving" | "stable" | "declining"
        """
        if len(self._history) < self.window:
            return TREND_STABLE

        scores = list(self._history)
        recent = scores[-self.window:]
        older = scores[-2 * self.window:-self.window]

        if not older:
            return TREND_STABLE

        difference = float(np.mean(recent)) - float(np.mean(older))

        if difference < -self.dead_band:
            return TREND_IMPROVING
        if difference > self.dead_band:
            return TREND_DECLINING
        return TREND_STABLE

    def reset(self):
        self._history.clear()
