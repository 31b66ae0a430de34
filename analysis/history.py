"""分析报告历史：保留期过滤和最近若干天的每日平均精力值"""

import threading
import time
from datetime import date, datetime, timedelta, timezone
from typing import List, Optional, Sequence

import numpy as np

from models.data_models import DailyEnergy, RestAnalysisResult

DAY_MS = 24 * 60 * 60 * 1000


def _report_day(report: RestAnalysisResult) -> date:
    """报告时间戳（毫秒）对应的 UTC 日期"""
    return datetime.fromtimestamp(report.timestamp / 1000.0, tz=timezone.utc).date()


def filter_recent(
    reports: Sequence[RestAnalysisResult],
    now: Optional[float] = None,
    days: int = 30,
) -> List[RestAnalysisResult]:
    """只保留最近 days 天内的报告（timestamp >= now - days 天）"""
    if now is None:
        now = time.time() * 1000.0
    cutoff = now - days * DAY_MS
    return [r for r in reports if r.timestamp >= cutoff]


def summarize_by_day(
    reports: Sequence[RestAnalysisResult],
    days: int = 7,
    today: Optional[date] = None,
) -> List[DailyEnergy]:
    """
    按天汇总最近 days 天的平均精力值。

    日期按 UTC 计算，从最早一天到 today 依次排列；没有报告的日期精力值为 0，
    范围外的报告忽略。

    Returns:
        DailyEnergy 列表，长度等于 days
    """
    if today is None:
        today = datetime.now(timezone.utc).date()

    window = [today - timedelta(days=days - 1 - i) for i in range(days)]
    grouped = {day: [] for day in window}
    for report in reports:
        day = _report_day(report)
        if day in grouped:
            grouped[day].append(report.energy_level)

    return [
        DailyEnergy(
            day=day.isoformat(),
            label=day.strftime("%a"),
            energy_level=float(np.mean(grouped[day])) if grouped[day] else 0.0,
            count=len(grouped[day]),
        )
        for day in window
    ]


class ReportHistory:
    """线程安全的内存报告历史，每次写入时丢弃超过保留期的报告"""

    def __init__(self, retention_days: int = 30):
        self.retention_days = retention_days
        self._reports: List[RestAnalysisResult] = []
        self._lock = threading.Lock()

    def add(self, report: RestAnalysisResult, now: Optional[float] = None) -> None:
        with self._lock:
            self._reports = filter_recent(self._reports + [report], now=now, days=self.retention_days)

    def reports(self) -> List[RestAnalysisResult]:
        """按时间从新到旧返回"""
        with self._lock:
            return sorted(self._reports, key=lambda r: r.timestamp, reverse=True)

    def summary(self, days: int = 7, today: Optional[date] = None) -> List[DailyEnergy]:
        with self._lock:
            return summarize_by_day(self._reports, days=days, today=today)

    def clear(self):
        with self._lock:
            self._reports = []

    def __len__(self):
        with self._lock:
            return len(self._reports)
