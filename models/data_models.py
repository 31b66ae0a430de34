"""核心数据模型定义"""

from dataclasses import asdict, dataclass
from typing import List, Optional

# 趋势取值
TREND_IMPROVING = "improving"
TREND_STABLE = "stable"
TREND_DECLINING = "declining"


def clamp(value: float, low: float, high: float) -> float:
    """将数值限制在 [low, high] 区间内"""
    return min(high, max(low, value))


@dataclass(frozen=True)
class LandmarkPoint:
    """人脸关键点（像素坐标，z 可选）"""
    x: float
    y: float
    z: float = 0.0
    name: Optional[str] = None

    @classmethod
    def from_raw(cls, raw) -> Optional["LandmarkPoint"]:
        """
        从 JSON 风格的原始数据构建关键点。

        支持 None、[x, y]、[x, y, z] 以及 {"x", "y", "z", "name"} 字典。
        """
        if raw is None:
            return None
        if isinstance(raw, LandmarkPoint):
            return raw
        if isinstance(raw, dict):
            return cls(
                x=float(raw["x"]),
                y=float(raw["y"]),
                z=float(raw.get("z") or 0.0),
                name=raw.get("name"),
            )
        if len(raw) not in (2, 3):
            raise ValueError(f"关键点坐标格式无效: {raw!r}")
        return cls(*(float(v) for v in raw))


@dataclass
class DetectedFace:
    """单帧人脸检测结果：按 FaceMesh 索引排列的关键点及检测置信度"""
    landmarks: List[Optional[LandmarkPoint]]
    confidence: float

    def __post_init__(self):
        self.confidence = clamp(float(self.confidence), 0.0, 1.0)


@dataclass(frozen=True)
class EyeResult:
    """眼睛分析结果"""
    ear: float
    left_ear: float
    right_ear: float
    is_blinking: bool


@dataclass(frozen=True)
class HeadPose:
    """头部姿态角（度，取绝对值）"""
    pitch: float = 0.0
    yaw: float = 0.0
    roll: float = 0.0


@dataclass(frozen=True)
class SkinAnalysis:
    pallor: float
    darkness: float


@dataclass(frozen=True)
class DrowsinessIndicators:
    """困倦指标"""
    heavy_eyelids: bool
    slow_blinks: bool
    head_dropping: bool
    reduced_facial_expression: bool


@dataclass(frozen=True)
class FrameMetrics:
    """单帧面部指标"""
    eye_aspect_ratio: float
    blink_rate: float
    eye_strain: float
    facial_tension: float
    head_pose: HeadPose
    skin_analysis: SkinAnalysis
    drowsiness_indicators: DrowsinessIndicators


@dataclass(frozen=True)
class FrameResult:
    """单帧分析结果"""
    timestamp: float
    face_detected: bool
    confidence: float
    metrics: FrameMetrics
    fatigue_score: float
    needs_rest: bool
    needs_sleep: bool
    trend: str
    recommendations: List[str]

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class SessionResult:
    """一次录制会话的聚合结果"""
    timestamp: float
    face_detected: bool
    confidence: float
    metrics: FrameMetrics
    fatigue_score: float
    needs_rest: bool
    needs_sleep: bool
    trend: str
    recommendations: List[str]
    frame_count: int

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class FacialFeatures:
    """面向展示层的面部特征描述"""
    eye_openness: str
    blink_rate: str
    skin_tone: str
    facial_movements: str
    posture: str
    yawning: bool


@dataclass
class DetailedAnalysis:
    primary_factor: str
    secondary_factor: str
    recommendation: str


@dataclass
class RestAnalysisResult:
    """最终休息分析报告，供展示层和持久化层使用"""
    needs_rest: bool
    needs_sleep: bool
    energy_level: float
    message: str
    timestamp: float
    facial_features: Optional[FacialFeatures] = None
    detailed_analysis: Optional[DetailedAnalysis] = None
    enhanced_analysis: Optional[SessionResult] = None
    mode: str = "landmark"

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class PerformanceMetrics:
    """处理性能统计"""
    average_processing_time: float
    frame_rate: float
    last_processing_time: float
    success_rate: float
    processed_frames: int = 0
    failed_frames: int = 0

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class VerificationResult:
    """摄像头检测能力自检结果"""
    is_working: bool
    accuracy: float
    performance: float
    recommendations: List[str]
    successful_frames: int = 0
    total_frames: int = 0

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class DailyEnergy:
    """单日平均精力值，无记录的日期为 0"""
    day: str
    label: str
    energy_level: float
    count: int = 0

    def to_dict(self) -> dict:
        return asdict(self)
