"""头部姿态分析模块，基于四个参考关键点的几何关系估计头部角度"""

import math
from typing import Optional, Sequence

from detectors.geometry import get_point
from models.data_models import HeadPose, LandmarkPoint

# 参考关键点索引
HEAD_POSE_INDICES = {
    "nose_tip": 1,
    "left_eye": 33,
    "right_eye": 362,
    "chin": 175,
}


class HeadPoseAnalyzer:
    """由鼻尖、双眼、下巴四点估计 pitch / yaw / roll"""

    def estimate_pose(self, landmarks: Sequence[Optional[LandmarkPoint]]) -> HeadPose:
        """
        估计头部姿态。

        - pitch: 眼部中心到下巴的连线角度
        - yaw: 眼部中心到鼻尖的连线角度
        - roll: 左眼到右眼的连线角度

        Args:
            landmarks: 整张人脸的关键点序列

        Returns:
            HeadPose，角度单位为度并取绝对值；任一参考点缺失时返回 (0, 0, 0)
        """
        nose = get_point(landmarks, HEAD_POSE_INDICES["nose_tip"])
        left_eye = get_point(landmarks, HEAD_POSE_INDICES["left_eye"])
        right_eye = get_point(landmarks, HEAD_POSE_INDICES["right_eye"])
        chin = get_point(landmarks, HEAD_POSE_INDICES["chin"])

        if nose is None or left_eye is None or right_eye is None or chin is None:
            return HeadPose()

        eye_center_x = (left_eye.x + right_eye.x) / 2.0
        eye_center_y = (left_eye.y + right_eye.y) / 2.0

        pitch = math.atan2(chin.y - eye_center_y, chin.x - eye_center_x)
        yaw = math.atan2(nose.x - eye_center_x, nose.y - eye_center_y)
        roll = math.atan2(right_eye.y - left_eye.y, right_eye.x - left_eye.x)

        return HeadPose(
            pitch=abs(math.degrees(pitch)),
            yaw=abs(math.degrees(yaw)),
            roll=abs(math.degrees(roll)),
        )
