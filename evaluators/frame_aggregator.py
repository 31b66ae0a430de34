"""多帧结果聚合模块，将一次会话的逐帧分析合并为会话结果"""

import time
from typing import Callable, List, Optional, Sequence

import numpy as np

from evaluators.fatigue_scorer import needs_rest, needs_sleep
from models.data_models import (
    DrowsinessIndicators,
    FrameMetrics,
    FrameResult,
    HeadPose,
    SessionResult,
    SkinAnalysis,
)


def _mean(results: Sequence[FrameResult], getter: Callable[[FrameResult], float]) -> float:
    return float(np.mean([getter(r) for r in results]))


def _majority(results: Sequence[FrameResult], getter: Callable[[FrameResult], bool]) -> bool:
    """超过半数帧为 True 时返回 True"""
    return sum(1 for r in results if getter(r)) > len(results) / 2


class FrameAggregator:
    """连续指标取平均，布尔指标多数表决，建议取并集，趋势取最后一帧。"""

    def aggregate(self, results: Sequence[FrameResult], timestamp: Optional[float] = None) -> SessionResult:
        """
        聚合逐帧分析结果。

        Args:
            results: 按时间顺序排列的帧结果，不能为空
            timestamp: 会话结果时间戳（毫秒），缺省为当前时间

        Returns:
            SessionResult

        Raises:
            ValueError: results 为空
        """
        if not results:
            raise ValueError("没有可聚合的帧分析结果")

        fatigue_score = _mean(results, lambda r: r.fatigue_score)

        metrics = FrameMetrics(
            eye_aspect_ratio=_mean(results, lambda r: r.metrics.eye_aspect_ratio),
            blink_rate=_mean(results, lambda r: r.metrics.blink_rate),
            eye_strain=_mean(results, lambda r: r.metrics.eye_strain),
            facial_tension=_mean(results, lambda r: r.metrics.facial_tension),
            head_pose=HeadPose(
                pitch=_mean(results, lambda r: r.metrics.head_pose.pitch),
                yaw=_mean(results, lambda r: r.metrics.head_pose.yaw),
                roll=_mean(results, lambda r: r.metrics.head_pose.roll),
            ),
            skin_analysis=SkinAnalysis(
                pallor=_mean(results, lambda r: r.metrics.skin_analysis.pallor),
                darkness=_mean(results, lambda r: r.metrics.skin_analysis.darkness),
            ),
            drowsiness_indicators=DrowsinessIndicators(
                heavy_eyelids=_majority(results, lambda r: r.metrics.drowsiness_indicators.heavy_eyelids),
                slow_blinks=_majority(results, lambda r: r.metrics.drowsiness_indicators.slow_blinks),
                head_dropping=_majority(results, lambda r: r.metrics.drowsiness_indicators.head_dropping),
                reduced_facial_expression=_majority(
                    results, lambda r: r.metrics.drowsiness_indicators.reduced_facial_expression
                ),
            ),
        )

        # 按首次出现顺序去重
        recommendations: List[str] = list(
            dict.fromkeys(text for r in results for text in r.recommendations)
        )

        return SessionResult(
            timestamp=timestamp if timestamp is not None else time.time() * 1000.0,
            face_detected=True,
            confidence=_mean(results, lambda r: r.confidence),
            metrics=metrics,
            fatigue_score=fatigue_score,
            needs_rest=needs_rest(fatigue_score),
            needs_sleep=needs_sleep(fatigue_score),
            trend=results[-1].trend,
            recommendations=recommendations,
            frame_count=len(results),
        )
