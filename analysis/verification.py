"""摄像头检测能力自检：连续分析若干测试帧，评估检测准确度和处理速度"""

import logging
from typing import Iterable, List, Optional, Sequence, Tuple

import numpy as np

from analysis.session import FaceAnalysisSession
from detectors.base_detector import FaceDetector
from models.data_models import VerificationResult

logger = logging.getLogger(__name__)

MIN_SUCCESSFUL_FRAMES = 3
WORKING_ACCURACY = 0.5
GOOD_ACCURACY = 0.7
MIN_FRAME_RATE = 10.0
PERFORMANCE_SCALE = 5.0

LIGHTING_ADVICE = [
    "Improve lighting conditions for better face detection",
    "Ensure face is clearly visible and unobstructed",
]
SPEED_ADVICE = [
    "Close other apps to improve processing speed",
    "Restart the app if performance is poor",
]
HARDWARE_ADVICE = [
    "Check camera permissions and hardware",
    "Ensure camera lens is clean",
]
OPTIMAL = "Camera performance is optimal for face analysis"


def evaluate_capabilities(
    confidences: Sequence[float],
    frame_rate: float,
    total_frames: Optional[int] = None,
) -> VerificationResult:
    """
    根据测试帧的检测置信度和处理帧率给出自检结论。

    Args:
        confidences: 检测到人脸的测试帧置信度
        frame_rate: 估算处理帧率 (FPS)
        total_frames: 测试帧总数，缺省等于检测成功帧数

    Returns:
        VerificationResult，accuracy 与 performance 均为 0-100
    """
    successes = len(confidences)
    accuracy = float(np.mean(confidences)) if successes else 0.0

    recommendations: List[str] = []
    if accuracy < GOOD_ACCURACY:
        recommendations.extend(LIGHTING_ADVICE)
    if frame_rate < MIN_FRAME_RATE:
        recommendations.extend(SPEED_ADVICE)
    if successes < MIN_SUCCESSFUL_FRAMES:
        recommendations.extend(HARDWARE_ADVICE)
    if not recommendations:
        recommendations.append(OPTIMAL)

    return VerificationResult(
        is_working=successes >= MIN_SUCCESSFUL_FRAMES and accuracy > WORKING_ACCURACY,
        accuracy=accuracy * 100.0,
        performance=min(100.0, frame_rate * PERFORMANCE_SCALE),
        recommendations=recommendations,
        successful_frames=successes,
        total_frames=successes if total_frames is None else total_frames,
    )


def verify_capabilities(
    detector: FaceDetector,
    frames: Iterable[Tuple[float, object]],
    config: Optional[dict] = None,
) -> VerificationResult:
    """用一个临时会话逐帧检测并分析，统计置信度和处理帧率后给出自检结论。"""
    session = FaceAnalysisSession(config)
    total = 0
    for timestamp, frame in frames:
        total += 1
        session.process(detector, frame, now=timestamp)

    confidences = [r.confidence for r in session.results]
    metrics = session.performance_metrics()
    result = evaluate_capabilities(confidences, metrics.frame_rate, total_frames=total)

    logger.info(
        "摄像头自检: %d/%d 帧检测成功, 准确度 %.1f%%, 帧率 %.1f",
        result.successful_frames, total, result.accuracy, metrics.frame_rate,
    )
    return result
