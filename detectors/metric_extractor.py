"""面部指标提取模块，从单帧关键点计算 FrameMetrics"""

from typing import Optional, Sequence

from detectors.eye_analyzer import EyeAnalyzer
from detectors.geometry import point_dispersion, select_points
from detectors.head_pose_analyzer import HeadPoseAnalyzer
from models.data_models import (
    DrowsinessIndicators,
    EyeResult,
    FrameMetrics,
    LandmarkPoint,
    SkinAnalysis,
)

# 眼部轮廓关键点（各 16 个）
LEFT_EYE_CONTOUR_INDICES = [33, 7, 163, 144, 145, 153, 154, 155, 133, 173, 157, 158, 159, 160, 161, 246]
RIGHT_EYE_CONTOUR_INDICES = [362, 382, 381, 380, 374, 373, 390, 249, 263, 466, 388, 387, 386, 385, 384, 398]

# 面部紧张度区域关键点
# 额头点各取一次；若按 [10, 151, 9, 10, 151, 9] 重复列出，额头权重加倍，紧张度数值会随之改变
FOREHEAD_INDICES = [10, 151, 9]
JAW_INDICES = [172, 136, 150, 149, 176, 148, 152, 377, 400, 378, 379, 365, 397, 288, 361, 323]
MOUTH_INDICES = [61, 84, 17, 314, 405, 320, 307, 375, 321, 308, 324, 318]
TENSION_INDICES = FOREHEAD_INDICES + JAW_INDICES + MOUTH_INDICES

# 离散度缩放系数
EYE_STRAIN_SCALE = 50.0
FACIAL_TENSION_SCALE = 30.0
PALLOR_SCALE = 20.0
DARKNESS_SCALE = 15.0

# 困倦指标阈值
HEAVY_EYELIDS_EAR = 0.2
SLOW_BLINK_RATE = 10.0
HEAD_DROPPING_PITCH = 15.0
REDUCED_EXPRESSION_TENSION = 0.3


class MetricExtractor:
    """组合眼部、头部姿态和离散度计算，输出单帧面部指标"""

    def __init__(self, eye_analyzer: Optional[EyeAnalyzer] = None,
                 head_pose_analyzer: Optional[HeadPoseAnalyzer] = None):
        self.eye_analyzer = eye_analyzer or EyeAnalyzer()
        self.head_pose_analyzer = head_pose_analyzer or HeadPoseAnalyzer()

    def analyze_eyes(self, landmarks: Sequence[Optional[LandmarkPoint]]) -> EyeResult:
        return self.eye_analyzer.analyze(landmarks)

    @staticmethod
    def eye_strain(landmarks: Sequence[Optional[LandmarkPoint]]) -> float:
        """双眼轮廓点离散度 ×50，上限 100"""
        points = select_points(landmarks, LEFT_EYE_CONTOUR_INDICES + RIGHT_EYE_CONTOUR_INDICES)
        return min(100.0, point_dispersion(points) * EYE_STRAIN_SCALE)

    @staticmethod
    def facial_tension(landmarks: Sequence[Optional[LandmarkPoint]]) -> float:
        """额头、下颌、嘴部关键点离散度 ×30，上限 100；缺失点跳过"""
        points = select_points(landmarks, TENSION_INDICES)
        return min(100.0, point_dispersion(points) * FACIAL_TENSION_SCALE)

    @staticmethod
    def skin_analysis(landmarks: Sequence[Optional[LandmarkPoint]]) -> SkinAnalysis:
        """
        皮肤状态估计。

        仅基于全脸关键点离散度，是像素级肤色分析的占位实现。
        """
        points = [p for p in landmarks if p is not None]
        dispersion = point_dispersion(points)
        return SkinAnalysis(
            pallor=min(100.0, dispersion * PALLOR_SCALE),
            darkness=min(100.0, dispersion * DARKNESS_SCALE),
        )

    @staticmethod
    def drowsiness_indicators(
        ear: float, blink_rate: float, pitch: float, facial_tension: float
    ) -> DrowsinessIndicators:
        # TODO: facial_tension 为 0-100 标度却与 0.3 比较，疑似量纲错误，待产品确认后再调整阈值
        return DrowsinessIndicators(
            heavy_eyelids=ear < HEAVY_EYELIDS_EAR,
            slow_blinks=blink_rate < SLOW_BLINK_RATE,
            head_dropping=pitch > HEAD_DROPPING_PITCH,
            reduced_facial_expression=facial_tension < REDUCED_EXPRESSION_TENSION,
        )

    def extract(
        self,
        landmarks: Sequence[Optional[LandmarkPoint]],
        blink_rate: float,
        eye_result: Optional[EyeResult] = None,
    ) -> FrameMetrics:
        """
        计算单帧全部面部指标。

        Args:
            landmarks: 整张人脸的关键点序列
            blink_rate: 眨眼跟踪器给出的每分钟眨眼次数
            eye_result: 已计算好的眼部结果，为 None 时重新计算

        Returns:
            FrameMetrics
        """
        if eye_result is None:
            eye_result = self.analyze_eyes(landmarks)

        head_pose = self.head_pose_analyzer.estimate_pose(landmarks)
        tension = self.facial_tension(landmarks)

        return FrameMetrics(
            eye_aspect_ratio=eye_result.ear,
            blink_rate=blink_rate,
            eye_strain=self.eye_strain(landmarks),
            facial_tension=tension,
            head_pose=head_pose,
            skin_analysis=self.skin_analysis(landmarks),
            drowsiness_indicators=self.drowsiness_indicators(
                eye_result.ear, blink_rate, head_pose.pitch, tension
            ),
        )
