"""分析报告生成模块，将会话结果转换为展示层使用的休息分析报告"""

import time
from typing import Optional

from models.data_models import (
    DetailedAnalysis,
    FacialFeatures,
    RestAnalysisResult,
    SessionResult,
)

DEFAULT_RECOMMENDATION = "Continue monitoring your health"


def energy_message(energy_level: float) -> str:
    """按精力值分档生成提示语"""
    if energy_level < 30:
        return "You look very tired. You should definitely get some sleep soon."
    if energy_level < 50:
        return "You seem tired. Consider taking a short nap or rest."
    if energy_level < 70:
        return "You're doing okay, but a little break might help you recharge."
    return "You look quite awake and energized. Do things that make you happy!"


def fatigue_message(fatigue_score: float) -> str:
    """按疲劳分数分档生成详细提示语"""
    if fatigue_score > 80:
        return (f"Critical fatigue detected ({round(fatigue_score)}%). Your eyes show significant strain "
                "and drowsiness indicators are present. Immediate rest is strongly recommended.")
    if fatigue_score > 60:
        return (f"Moderate fatigue detected ({round(fatigue_score)}%). Your facial analysis indicates "
                "tiredness. Consider taking a break soon.")
    if fatigue_score > 40:
        return (f"Mild fatigue detected ({round(fatigue_score)}%). Some signs of tiredness are visible, "
                "but you're still relatively alert.")
    return (f"You appear alert and well-rested ({round(100 - fatigue_score)}% energy). Your facial "
            "indicators suggest good health and alertness.")


def describe_features(session: SessionResult) -> FacialFeatures:
    metrics = session.metrics
    indicators = metrics.drowsiness_indicators
    return FacialFeatures(
        eye_openness="wide" if metrics.eye_aspect_ratio > 0.25 else "narrowed",
        blink_rate="slow" if metrics.blink_rate < 15 else "normal",
        skin_tone="pale" if metrics.skin_analysis.pallor > 50 else "healthy",
        facial_movements="tense" if metrics.facial_tension > 50 else "relaxed",
        posture="drooping" if metrics.head_pose.pitch > 15 else "upright",
        yawning=indicators.slow_blinks and indicators.heavy_eyelids,
    )


def primary_factor(session: SessionResult) -> str:
    """按优先级找出最主要的疲劳因素"""
    metrics = session.metrics
    indicators = metrics.drowsiness_indicators

    if indicators.heavy_eyelids:
        return "heavy eyelids and reduced eye openness"
    if metrics.eye_strain > 60:
        return "significant eye strain and fatigue"
    if indicators.slow_blinks:
        return "reduced blink rate indicating drowsiness"
    if metrics.head_pose.pitch > 15:
        return "head dropping and poor posture"
    if metrics.facial_tension < 30:
        return "reduced facial muscle tension"
    return "overall facial fatigue indicators"


def secondary_factor(session: SessionResult) -> str:
    skin = session.metrics.skin_analysis
    if skin.darkness > 50:
        return "under-eye darkness suggesting sleep deprivation"
    if skin.pallor > 50:
        return "facial pallor indicating fatigue"
    return "consistent fatigue patterns across facial features"


def build_report(session: SessionResult, timestamp: Optional[float] = None) -> RestAnalysisResult:
    """
    生成休息分析报告。

    Args:
        session: 会话聚合结果
        timestamp: 报告时间戳（毫秒），缺省为当前时间

    Returns:
        RestAnalysisResult，精力值 = max(0, 100 - 疲劳分数)
    """
    recommendation = session.recommendations[0] if session.recommendations else DEFAULT_RECOMMENDATION

    return RestAnalysisResult(
        needs_rest=session.needs_rest,
        needs_sleep=session.needs_sleep,
        energy_level=max(0.0, 100.0 - session.fatigue_score),
        message=fatigue_message(session.fatigue_score),
        timestamp=timestamp if timestamp is not None else time.time() * 1000.0,
        facial_features=describe_features(session),
        detailed_analysis=DetailedAnalysis(
            primary_factor=primary_factor(session),
            secondary_factor=secondary_factor(session),
            recommendation=recommendation,
        ),
        enhanced_analysis=session,
        mode="landmark",
    )
