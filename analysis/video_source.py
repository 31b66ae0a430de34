"""视频帧采样模块，从视频文件或摄像头读取用于分析的若干帧"""

import logging
import time
from typing import List, Tuple, Union

import cv2
import numpy as np

logger = logging.getLogger(__name__)


def sample_frames(
    source: Union[str, int],
    count: int = 5,
    interval_ms: float = 400.0,
) -> List[Tuple[float, np.ndarray]]:
    """
    采样若干帧。

    视频文件按总帧数均匀取帧，时间戳取自视频位置；
    摄像头等无总帧数的来源连续读取，每帧间隔 interval_ms。

    Args:
        source: 视频文件路径或摄像头编号
        count: 采样帧数
        interval_ms: 实时来源的采样间隔（毫秒）

    Returns:
        [(时间戳毫秒, BGR 图像帧), ...]

    Raises:
        IOError: 无法打开视频源
    """
    cap = cv2.VideoCapture(source)
    if not cap.isOpened():
        raise IOError(f"无法打开视频源: {source}")

    try:
        total = int(cap.get(cv2.CAP_PROP_FRAME_COUNT) or 0)
        if total > 0:
            frames = _sample_file(cap, total, count)
        else:
            frames = _sample_stream(cap, count, interval_ms)
    finally:
        cap.release()

    logger.info("视频源 %s 采样完成: %d/%d 帧", source, len(frames), count)
    return frames


def _sample_file(cap, total: int, count: int) -> List[Tuple[float, np.ndarray]]:
    """按总帧数均匀取帧"""
    frames = []
    positions = np.linspace(0, total - 1, num=min(count, total)).astype(int)

    for position in positions:
        cap.set(cv2.CAP_PROP_POS_FRAMES, int(position))
        ret, frame = cap.read()
        if not ret:
            logger.warning("读取第 %d 帧失败", position)
            continue
        frames.append((float(cap.get(cv2.CAP_PROP_POS_MSEC)), frame))

    return frames


def _sample_stream(cap, count: int, interval_ms: float) -> List[Tuple[float, np.ndarray]]:
    """连续读取实时画面"""
    frames = []
    for i in range(count):
        ret, frame = cap.read()
        if ret:
            frames.append((time.time() * 1000.0, frame))
        else:
            logger.warning("读取摄像头画面失败")
        if i < count - 1:
            time.sleep(interval_ms / 1000.0)
    return frames
