"""分析策略：基于关键点的评分流水线，以及独立的随机演示模式"""

import logging
import math
import random
import time
from typing import Iterable, Optional, Tuple

from analysis.session import FaceAnalysisSession
from detectors.base_detector import FaceDetector
from evaluators.report_builder import build_report, energy_message
from models.data_models import DetailedAnalysis, FacialFeatures, RestAnalysisResult

logger = logging.getLogger(__name__)

MODES = ("landmark", "demo")


class LandmarkAnalysisStrategy:
    """对每帧做关键点检测和评分，聚合后生成报告。每次调用使用新的会话。"""

    name = "landmark"

    def __init__(self, detector: FaceDetector, config: Optional[dict] = None):
        self.detector = detector
        self.config = config
        self.last_session: Optional[FaceAnalysisSession] = None

    def analyze(self, frames: Iterable[Tuple[float, object]]) -> RestAnalysisResult:
        """
        Args:
            frames: (时间戳毫秒, 图像帧) 序列

        Returns:
            RestAnalysisResult

        Raises:
            ValueError: 所有帧都未检测到人脸
        """
        session = FaceAnalysisSession(self.config)
        self.last_session = session

        for timestamp, frame in frames:
            result = session.process(self.detector, frame, now=timestamp)
            if result is None:
                logger.info("时间戳 %.0f 的帧未检测到人脸，已跳过", timestamp)

        return build_report(session.finish())


class DemoAnalysisStrategy:
    """
    演示模式：不做任何面部分析，按近似钟形分布随机生成精力值。

    仅用于界面演示，与评分流水线完全分离。
    """

    name = "demo"

    def __init__(self, rng: Optional[random.Random] = None):
        self.rng = rng or random.Random()

    def energy_level(self) -> int:
        """两个均匀随机数取平均，映射到 30-100"""
        bell_curve = (self.rng.random() + self.rng.random()) / 2.0
        return int(math.floor(bell_curve * 70 + 30))

    def analyze(self, frames: Optional[Iterable] = None) -> RestAnalysisResult:
        energy = self.energy_level()

        features = FacialFeatures(
            eye_openness="wide" if energy > 50 else "narrowed",
            blink_rate="frequent" if energy < 40 else "normal",
            skin_tone="pale" if energy < 30 else "healthy",
            facial_movements="slow" if energy < 50 else "alert",
            posture="drooping" if energy < 40 else "upright",
            yawning=energy < 35,
        )

        if energy < 40:
            primary = "frequent blinking and droopy eyelids"
        elif energy < 70:
            primary = "slight facial tension"
        else:
            primary = "alert expressions"

        if energy < 30:
            recommendation = "getting sleep soon"
        elif energy < 50:
            recommendation = "taking a short rest"
        else:
            recommendation = "continuing current activities"

        return RestAnalysisResult(
            needs_rest=energy < 50,
            needs_sleep=energy < 30,
            energy_level=float(energy),
            message=energy_message(energy),
            timestamp=time.time() * 1000.0,
            facial_features=features,
            detailed_analysis=DetailedAnalysis(
                primary_factor=primary,
                secondary_factor="reduced facial responsiveness" if energy < 50 else "good facial muscle tone",
                recommendation=recommendation,
            ),
            enhanced_analysis=None,
            mode="demo",
        )


def create_strategy(mode: str, detector: Optional[FaceDetector] = None, config: Optional[dict] = None):
    """按模式名创建分析策略"""
    if mode == "landmark":
        if detector is None:
            raise ValueError("landmark 模式需要提供人脸检测器")
        return LandmarkAnalysisStrategy(detector, config)
    if mode == "demo":
        return DemoAnalysisStrategy()
    raise ValueError(f"不支持的分析模式: {mode}")
