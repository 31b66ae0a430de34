"""综合疲劳评分模块"""

from models.data_models import FrameMetrics, clamp

REST_THRESHOLD = 60.0
SLEEP_THRESHOLD = 80.0


def needs_rest(score: float) -> bool:
    return score > REST_THRESHOLD


def needs_sleep(score: float) -> bool:
    return score > SLEEP_THRESHOLD


class FatigueScorer:
    """将单帧面部指标加权合成为 0-100 的疲劳分数。"""

    WEIGHTS = {
        "ear": 0.30,
        "blink": 0.20,
        "strain": 0.20,
        "tension": 0.15,
        "pose": 0.15,
    }

    def component_scores(self, metrics: FrameMetrics) -> dict:
        """
        计算各子项疲劳值。

        - ear: max(0, (0.3 - EAR) * 300)
        - blink: 眨眼率 < 10 时固定为 80，否则 max(0, (30 - 眨眼率) * 2)
        - strain: 眼疲劳值原样使用
        - tension: 100 - 面部紧张度
        - pose: pitch * 3，不做上限
        """
        if metrics.blink_rate < 10:
            blink_fatigue = 80.0
        else:
            blink_fatigue = max(0.0, (30.0 - metrics.blink_rate) * 2.0)

        return {
            "ear": max(0.0, (0.3 - metrics.eye_aspect_ratio) * 300.0),
            "blink": blink_fatigue,
            "strain": metrics.eye_strain,
            "tension": 100.0 - metrics.facial_tension,
            "pose": metrics.head_pose.pitch * 3.0,
        }

    def score(self, metrics: FrameMetrics) -> float:
        """
        计算疲劳分数。

        Args:
            metrics: 单帧面部指标

        Returns:
            加权和，限制在 [0, 100]
        """
        components = self.component_scores(metrics)
        total = sum(components[key] * weight for key, weight in self.WEIGHTS.items())
        return clamp(total, 0.0, 100.0)
