"""处理性能统计"""

from collections import deque

import numpy as np

from models.data_models import PerformanceMetrics

MAX_FRAME_RATE = 30.0


class PerformanceTracker:
    """记录最近成功帧的处理耗时以及成功率"""

    def __init__(self, history_size: int = 20):
        self._times = deque(maxlen=history_size)
        self._last_time = 0.0
        self._attempts = 0
        self._successes = 0

    def record(self, processing_time_ms: float, successful: bool) -> None:
        self._attempts += 1
        self._last_time = processing_time_ms
        if successful:
            self._successes += 1
            self._times.append(processing_time_ms)

    def metrics(self) -> PerformanceMetrics:
        """
        汇总性能指标。

        帧率按平均耗时估算，上限 30 FPS；成功率为百分比。
        """
        average = float(np.mean(self._times)) if self._times else 0.0
        frame_rate = min(MAX_FRAME_RATE, 1000.0 / average) if average > 0 else 0.0
        success_rate = self._successes / self._attempts * 100.0 if self._attempts else 0.0

        return PerformanceMetrics(
            average_processing_time=average,
            frame_rate=frame_rate,
            last_processing_time=self._last_time,
            success_rate=success_rate,
            processed_frames=self._successes,
            failed_frames=self._attempts - self._successes,
        )

    def reset(self):
        self._times.clear()
        self._last_time = 0.0
        self._attempts = 0
        self._successes = 0
