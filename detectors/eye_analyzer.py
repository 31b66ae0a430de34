"""眼睛状态分析模块，负责计算 EAR 值并判断眨眼状态"""

from typing import List, Optional, Sequence

from detectors.geometry import distance, select_points
from models.data_models import EyeResult, LandmarkPoint

# EAR 计算用的 6 个眼部关键点 (p1..p6)
LEFT_EYE_INDICES = [33, 160, 158, 133, 153, 144]
RIGHT_EYE_INDICES = [362, 385, 387, 263, 373, 380]

# 无法测量时使用的中性 EAR
DEFAULT_EAR = 0.3
DEFAULT_BLINK_THRESHOLD = 0.25


class EyeAnalyzer:
    """计算双眼 EAR 值，按阈值输出眨眼状态"""

    def __init__(self, blink_threshold: float = DEFAULT_BLINK_THRESHOLD):
        self.blink_threshold = blink_threshold

    def calculate_ear(self, eye_points: List[LandmarkPoint]) -> float:
        """
        计算单只眼睛的 EAR 值。

        公式: EAR = (|p2-p6| + |p3-p5|) / (2 * |p1-p4|)

        Args:
            eye_points: 眼睛轮廓关键点，按 p1..p6 顺序

        Returns:
            EAR 值；不足 6 个点时返回默认值 0.3，分母为零时返回 0.0
        """
        if len(eye_points) < 6:
            return DEFAULT_EAR

        p1, p2, p3, p4, p5, p6 = eye_points[:6]

        vertical_1 = distance(p2, p6)
        vertical_2 = distance(p3, p5)
        horizontal = distance(p1, p4)

        if horizontal == 0.0:
            return 0.0

        return (vertical_1 + vertical_2) / (2.0 * horizontal)

    def analyze(self, landmarks: Sequence[Optional[LandmarkPoint]]) -> EyeResult:
        """
        分析双眼状态。

        Args:
            landmarks: 整张人脸的关键点序列

        Returns:
            EyeResult(ear, left_ear, right_ear, is_blinking)
        """
        left_ear = self.calculate_ear(select_points(landmarks, LEFT_EYE_INDICES))
        right_ear = self.calculate_ear(select_points(landmarks, RIGHT_EYE_INDICES))
        avg_ear = (left_ear + right_ear) / 2.0

        return EyeResult(
            ear=avg_ear,
            left_ear=left_ear,
            right_ear=right_ear,
            is_blinking=avg_ear < self.blink_threshold,
        )
