"""建议生成模块"""

from typing import List

from models.data_models import FrameMetrics

NAP_NOW = "Take a 20-30 minute nap immediately and avoid driving or operating machinery"
SHORT_BREAK = "Take a 10-15 minute break and get some fresh air or light exercise"
SCREEN_BREAK = ("Look away from screens for 5-10 minutes and practice the 20-20-20 rule "
                "(look 20 feet away for 20 seconds every 20 minutes)")
BLINK_MORE = "Consciously blink more frequently and use eye drops if your eyes feel dry"
POSTURE = "Improve your posture and adjust your workspace ergonomics"
ALL_GOOD = "Your alertness levels look good! Keep maintaining healthy sleep habits"


class RecommendationGenerator:
    """按固定优先级把分数和指标映射为建议列表"""

    def recommend(self, metrics: FrameMetrics, score: float) -> List[str]:
        recommendations: List[str] = []

        if score > 80:
            recommendations.append(NAP_NOW)
        elif score > 60:
            recommendations.append(SHORT_BREAK)

        if metrics.eye_strain > 60:
            recommendations.append(SCREEN_BREAK)

        if metrics.blink_rate < 10:
            recommendations.append(BLINK_MORE)

        if metrics.head_pose.pitch > 15:
            recommendations.append(POSTURE)

        if not recommendations:
            recommendations.append(ALL_GOOD)

        return recommendations
