"""眨眼跟踪模块，维护 60 秒滑动窗口内的眨眼时间戳"""

import time
from collections import deque
from typing import Optional


def now_ms() -> float:
    """当前时间（毫秒）"""
    return time.time() * 1000.0


class BlinkTracker:
    """记录去抖后的眨眼事件，输出每分钟眨眼次数"""

    def __init__(self, debounce_ms: float = 200.0, window_ms: float = 60000.0):
        """
        Args:
            debounce_ms: 两次眨眼之间的最小间隔，持续闭眼不会被重复计数
            window_ms: 滑动窗口长度
        """
        self.debounce_ms = debounce_ms
        self.window_ms = window_ms
        self._blinks = deque()

    def update(self, is_blinking: bool, now: Optional[float] = None) -> None:
        """
        更新眨眼记录并裁剪过期时间戳。

        Args:
            is_blinking: 当前帧是否处于眨眼状态
            now: 当前时间戳（毫秒），缺省为系统时间
        """
        if now is None:
            now = now_ms()

        if is_blinking:
            if not self._blinks or now - self._blinks[-1] >= self.debounce_ms:
                self._blinks.append(now)

        while self._blinks and now - self._blinks[0] >= self.window_ms:
            self._blinks.popleft()

    def blink_rate(self) -> float:
        """窗口内的眨眼次数，即每分钟眨眼数"""
        return float(len(self._blinks))

    @property
    def timestamps(self) -> list:
        return list(self._blinks)

    def reset(self):
        """清空眨眼记录"""
        self._blinks.clear()
