"""单次分析会话：持有本会话的眨眼记录和疲劳历史，逐帧输出分析结果"""

import logging
import time
from typing import List, Optional

from analysis.config import merge_config
from analysis.performance import PerformanceTracker
from detectors.base_detector import FaceDetector
from detectors.blink_tracker import BlinkTracker, now_ms
from detectors.eye_analyzer import EyeAnalyzer
from detectors.metric_extractor import MetricExtractor
from evaluators.fatigue_scorer import FatigueScorer, needs_rest, needs_sleep
from evaluators.frame_aggregator import FrameAggregator
from evaluators.recommendation_generator import RecommendationGenerator
from evaluators.trend_analyzer import TrendAnalyzer
from models.data_models import DetectedFace, FrameResult, PerformanceMetrics, SessionResult

logger = logging.getLogger(__name__)


class FaceAnalysisSession:
    """
    一次录制会话的分析流水线。

    每个会话独立持有 BlinkTracker 和 TrendAnalyzer，不同会话之间不共享状态。
    """

    def __init__(self, config: Optional[dict] = None):
        config = merge_config(config)
        self.config = config

        self.extractor = MetricExtractor(
            eye_analyzer=EyeAnalyzer(blink_threshold=config["blink_threshold"]),
        )
        self.blink_tracker = BlinkTracker(
            debounce_ms=config["blink_debounce_ms"],
            window_ms=config["blink_window_ms"],
        )
        self.scorer = FatigueScorer()
        self.trend_analyzer = TrendAnalyzer(
            history_size=config["history_size"],
            window=config["trend_window"],
            dead_band=config["trend_dead_band"],
        )
        self.recommender = RecommendationGenerator()
        self.aggregator = FrameAggregator()
        self.performance = PerformanceTracker()
        self._results: List[FrameResult] = []

    @property
    def results(self) -> List[FrameResult]:
        return list(self._results)

    def analyze_frame(self, face: Optional[DetectedFace], now: Optional[float] = None) -> Optional[FrameResult]:
        """
        分析单帧检测结果。

        Args:
            face: 检测器输出，None 表示该帧无人脸，直接跳过
            now: 帧时间戳（毫秒），缺省为当前时间

        Returns:
            FrameResult；无人脸时返回 None，且不影响会话状态
        """
        if face is None:
            return None

        if now is None:
            now = now_ms()

        eye_result = self.extractor.analyze_eyes(face.landmarks)
        self.blink_tracker.update(eye_result.is_blinking, now)

        metrics = self.extractor.extract(
            face.landmarks, self.blink_tracker.blink_rate(), eye_result=eye_result
        )
        score = self.scorer.score(metrics)

        self.trend_analyzer.record(score)

        result = FrameResult(
            timestamp=now,
            face_detected=True,
            confidence=face.confidence,
            metrics=metrics,
            fatigue_score=score,
            needs_rest=needs_rest(score),
            needs_sleep=needs_sleep(score),
            trend=self.trend_analyzer.classify(),
            recommendations=self.recommender.recommend(metrics, score),
        )
        self._results.append(result)

        logger.debug(
            "帧分析完成: EAR=%.3f 眨眼率=%.0f 疲劳分数=%.1f 趋势=%s",
            metrics.eye_aspect_ratio, metrics.blink_rate, score, result.trend,
        )
        return result

    def process(self, detector: FaceDetector, frame, now: Optional[float] = None) -> Optional[FrameResult]:
        """检测并分析一帧，同时记录处理耗时。"""
        start = time.perf_counter()
        return self._analyze_and_record(detector.detect(frame), now, start)

    def analyze_timed(self, face: Optional[DetectedFace], now: Optional[float] = None) -> Optional[FrameResult]:
        """分析外部已检测好的一帧，同时记录处理耗时；无人脸计为失败帧。"""
        return self._analyze_and_record(face, now, time.perf_counter())

    def _analyze_and_record(self, face, now, start):
        result = self.analyze_frame(face, now=now)
        elapsed_ms = (time.perf_counter() - start) * 1000.0

        self.performance.record(elapsed_ms, result is not None)
        return result

    def finish(self, timestamp: Optional[float] = None) -> SessionResult:
        """
        聚合本会话全部帧结果。

        Raises:
            ValueError: 会话内没有任何检测到人脸的帧
        """
        session_result = self.aggregator.aggregate(self._results, timestamp=timestamp)
        logger.info(
            "会话聚合完成: %d 帧, 疲劳分数 %.1f, 趋势 %s",
            session_result.frame_count, session_result.fatigue_score, session_result.trend,
        )
        return session_result

    def performance_metrics(self) -> PerformanceMetrics:
        return self.performance.metrics()

    def reset(self):
        """清空会话状态"""
        self.blink_tracker.reset()
        self.trend_analyzer.reset()
        self.performance.reset()
        self._results = []
