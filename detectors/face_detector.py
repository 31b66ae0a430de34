"""人脸关键点检测模块，基于 MediaPipe FaceDetection + FaceMesh"""

import logging
from typing import Optional

import cv2
import mediapipe as mp
import numpy as np

from detectors.base_detector import FaceDetector
from models.data_models import DetectedFace, LandmarkPoint

logger = logging.getLogger(__name__)


class MediaPipeFaceDetector(FaceDetector):
    """使用 MediaPipe 检测人脸置信度和 468 个面部关键点"""

    name = "mediapipe"

    def __init__(
        self,
        max_num_faces: int = 1,
        min_detection_confidence: float = 0.5,
    ):
        """初始化 MediaPipe FaceDetection 和 FaceMesh"""
        self._face_detection = mp.solutions.face_detection.FaceDetection(
            model_selection=0,
            min_detection_confidence=min_detection_confidence,
        )
        self._face_mesh = mp.solutions.face_mesh.FaceMesh(
            max_num_faces=max_num_faces,
            min_detection_confidence=min_detection_confidence,
            min_tracking_confidence=0.5,
            refine_landmarks=False,
        )

    def detect(self, frame: np.ndarray) -> Optional[DetectedFace]:
        """
        检测单帧图像中的人脸关键点。

        Args:
            frame: BGR 格式的 OpenCV 图像帧

        Returns:
            DetectedFace，关键点为像素坐标；未检测到人脸时返回 None
        """
        h, w = frame.shape[:2]

        # BGR -> RGB
        rgb_frame = cv2.cvtColor(frame, cv2.COLOR_BGR2RGB)
        rgb_frame.flags.writeable = False

        detection_results = self._face_detection.process(rgb_frame)
        if not detection_results.detections:
            logger.debug("未检测到人脸")
            return None

        mesh_results = self._face_mesh.process(rgb_frame)
        if not mesh_results.multi_face_landmarks:
            logger.debug("检测到人脸但关键点提取失败")
            return None

        detection = detection_results.detections[0]
        confidence = float(detection.score[0]) if detection.score else 0.0

        face = mesh_results.multi_face_landmarks[0]

        # 将归一化坐标转换为像素坐标
        landmarks = [
            LandmarkPoint(x=lm.x * w, y=lm.y * h, z=lm.z * w, name=f"point_{i}")
            for i, lm in enumerate(face.landmark)
        ]

        return DetectedFace(landmarks=landmarks, confidence=confidence)

    def close(self):
        """释放 MediaPipe 资源"""
        self._face_detection.close()
        self._face_mesh.close()
