"""回放预先采集的关键点数据的确定性检测器"""

import json
from typing import List, Optional, Sequence

from detectors.base_detector import FaceDetector
from models.data_models import DetectedFace, LandmarkPoint


def parse_detected_face(data: Optional[dict]) -> Optional[DetectedFace]:
    """
    从 JSON 字典构建 DetectedFace。

    格式: {"landmarks": [[x, y], {"x": .., "y": ..}, null, ...], "confidence": 0.9}
    data 为 None 或 face_detected 为 false 时表示该帧未检测到人脸。
    """
    if data is None or not data.get("face_detected", True):
        return None

    raw_landmarks = data.get("landmarks")
    if not raw_landmarks:
        return None

    landmarks = [LandmarkPoint.from_raw(raw) for raw in raw_landmarks]
    return DetectedFace(landmarks=landmarks, confidence=data.get("confidence", 1.0))


class FixtureFaceDetector(FaceDetector):
    """按顺序回放给定的检测结果，忽略输入帧内容"""

    name = "fixture"

    def __init__(self, faces: Sequence[Optional[DetectedFace]], loop: bool = True):
        """
        Args:
            faces: 依次返回的检测结果，None 表示该帧无人脸
            loop: 回放结束后是否从头开始；否则之后一律返回 None
        """
        self._faces: List[Optional[DetectedFace]] = list(faces)
        self.loop = loop
        self._index = 0

    @classmethod
    def from_json(cls, path: str, loop: bool = True) -> "FixtureFaceDetector":
        """从 JSON 文件加载，文件内容为帧列表或 {"frames": [...]}"""
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)

        frames = data["frames"] if isinstance(data, dict) else data
        return cls([parse_detected_face(item) for item in frames], loop=loop)

    def __len__(self):
        return len(self._faces)

    def detect(self, frame=None) -> Optional[DetectedFace]:
        if not self._faces:
            return None

        if self._index >= len(self._faces):
            if not self.loop:
                return None
            self._index = 0

        face = self._faces[self._index]
        self._index += 1
        return face

    def reset(self):
        self._index = 0
