"""人脸检测能力接口"""

from typing import Optional

from models.data_models import DetectedFace


class FaceDetector:
    """检测器基类：detect(frame) 返回 DetectedFace，未检测到人脸时返回 None"""

    name = "base"

    def detect(self, frame) -> Optional[DetectedFace]:
        raise NotImplementedError

    def close(self):
        """释放检测器资源"""
