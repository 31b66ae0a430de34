"""MetricExtractor 与几何工具单元测试"""

import math

import pytest

from detectors.geometry import get_point, point_dispersion, select_points
from detectors.metric_extractor import (
    FOREHEAD_INDICES,
    JAW_INDICES,
    MOUTH_INDICES,
    MetricExtractor,
)
from models.data_models import FrameMetrics, LandmarkPoint

from landmark_factory import build_landmarks


def _p(x, y):
    return LandmarkPoint(x, y)


class TestGeometry:
    def test_select_points_skips_missing(self):
        landmarks = [_p(0, 0), None, _p(2, 2)]
        assert select_points(landmarks, [0, 1, 2, 5]) == [_p(0, 0), _p(2, 2)]

    def test_get_point_out_of_range(self):
        assert get_point([_p(0, 0)], 3) is None
        assert get_point([_p(0, 0)], -1) is None

    def test_dispersion_of_square(self):
        # 四点到中心距离均为 sqrt(2)
        points = [_p(0, 0), _p(2, 0), _p(0, 2), _p(2, 2)]
        assert point_dispersion(points) == pytest.approx(math.sqrt(2))

    def test_dispersion_of_two_points(self):
        assert point_dispersion([_p(0, 0), _p(6, 8)]) == pytest.approx(5.0)

    def test_dispersion_fewer_than_two_points(self):
        assert point_dispersion([]) == 0.0
        assert point_dispersion([_p(3, 4)]) == 0.0

    def test_dispersion_ignores_z(self):
        points = [LandmarkPoint(0, 0, 100), LandmarkPoint(6, 8, -100)]
        assert point_dispersion(points) == pytest.approx(5.0)


class TestEyeStrain:
    def test_scaled_dispersion(self):
        # 双眼中心相距 0.2，离散度约 0.1 量级，×50 后远低于上限
        strain = MetricExtractor.eye_strain(build_landmarks())
        assert 0.0 < strain < 100.0

    def test_capped_at_100(self):
        landmarks = build_landmarks()
        scaled = [LandmarkPoint(p.x * 1000, p.y * 1000) if p else None for p in landmarks]
        assert MetricExtractor.eye_strain(scaled) == 100.0

    def test_no_eye_points(self):
        assert MetricExtractor.eye_strain([None] * 468) == 0.0


class TestFacialTension:
    def _tension_landmarks(self, spread):
        landmarks = [None] * 468
        for n, index in enumerate(FOREHEAD_INDICES + JAW_INDICES + MOUTH_INDICES):
            landmarks[index] = LandmarkPoint((n % 2) * spread, 0.0)
        return landmarks

    def test_scaled_by_thirty(self):
        landmarks = [None] * 468
        landmarks[JAW_INDICES[0]] = _p(0, 0)
        landmarks[MOUTH_INDICES[0]] = _p(0.2, 0)
        # 两点离散度 0.1 → ×30 = 3
        assert MetricExtractor.facial_tension(landmarks) == pytest.approx(3.0)

    def test_missing_points_filtered(self):
        """缺失点不按 0 处理，只用存在的点计算"""
        landmarks = [None] * 468
        landmarks[FOREHEAD_INDICES[0]] = _p(10, 10)
        landmarks[FOREHEAD_INDICES[1]] = _p(10.2, 10)
        assert MetricExtractor.facial_tension(landmarks) == pytest.approx(3.0)

    def test_forehead_points_counted_once(self):
        """额头三个点各计一次，不重复加权"""
        assert len(set(FOREHEAD_INDICES)) == len(FOREHEAD_INDICES) == 3

        landmarks = [None] * 468
        forehead = [_p(0, 0), _p(0.3, 0), _p(0, 0.3)]
        for index, point in zip(FOREHEAD_INDICES, forehead):
            landmarks[index] = point
        landmarks[JAW_INDICES[0]] = _p(0.9, 0)

        tension = MetricExtractor.facial_tension(landmarks)
        assert tension == pytest.approx(point_dispersion(forehead + [_p(0.9, 0)]) * 30)
        assert tension != pytest.approx(point_dispersion(forehead * 2 + [_p(0.9, 0)]) * 30)

    def test_capped_at_100(self):
        assert MetricExtractor.facial_tension(self._tension_landmarks(100.0)) == 100.0

    def test_no_points(self):
        assert MetricExtractor.facial_tension([]) == 0.0


class TestSkinAnalysis:
    def test_uses_all_points(self):
        landmarks = [_p(0, 0), None, _p(0.2, 0)]
        skin = MetricExtractor.skin_analysis(landmarks)
        assert skin.pallor == pytest.approx(2.0)
        assert skin.darkness == pytest.approx(1.5)

    def test_capped_at_100(self):
        skin = MetricExtractor.skin_analysis([_p(0, 0), _p(500, 500)])
        assert skin.pallor == 100.0
        assert skin.darkness == 100.0


class TestDrowsinessIndicators:
    def test_all_false(self):
        indicators = MetricExtractor.drowsiness_indicators(ear=0.3, blink_rate=15, pitch=5, facial_tension=50)
        assert not any(vars(indicators).values())

    def test_all_true(self):
        indicators = MetricExtractor.drowsiness_indicators(ear=0.1, blink_rate=5, pitch=20, facial_tension=0.1)
        assert all(vars(indicators).values())

    def test_thresholds_are_strict(self):
        indicators = MetricExtractor.drowsiness_indicators(ear=0.2, blink_rate=10, pitch=15, facial_tension=0.3)
        assert indicators.heavy_eyelids is False
        assert indicators.slow_blinks is False
        assert indicators.head_dropping is False
        assert indicators.reduced_facial_expression is False

    def test_reduced_expression_compares_raw_tension_with_point_three(self):
        """面部紧张度为 0-100 标度，这里与 0.3 比较：只有接近 0 时才触发"""
        low = MetricExtractor.drowsiness_indicators(ear=0.3, blink_rate=15, pitch=0, facial_tension=0.29)
        mid = MetricExtractor.drowsiness_indicators(ear=0.3, blink_rate=15, pitch=0, facial_tension=5.0)
        assert low.reduced_facial_expression is True
        assert mid.reduced_facial_expression is False


class TestExtract:
    def test_returns_frame_metrics(self):
        metrics = MetricExtractor().extract(build_landmarks(ear=0.3), blink_rate=12)
        assert isinstance(metrics, FrameMetrics)
        assert metrics.eye_aspect_ratio == pytest.approx(0.3)
        assert metrics.blink_rate == 12
        assert metrics.head_pose.pitch == pytest.approx(90.0)
        assert metrics.drowsiness_indicators.head_dropping is True
        assert metrics.drowsiness_indicators.slow_blinks is False
        assert metrics.drowsiness_indicators.heavy_eyelids is False

    def test_uses_given_eye_result(self):
        extractor = MetricExtractor()
        landmarks = build_landmarks(ear=0.15)
        eye_result = extractor.analyze_eyes(landmarks)
        metrics = extractor.extract(landmarks, blink_rate=3, eye_result=eye_result)
        assert metrics.eye_aspect_ratio == eye_result.ear
        assert metrics.drowsiness_indicators.heavy_eyelids is True
        assert metrics.drowsiness_indicators.slow_blinks is True

    def test_missing_pose_points_neutral(self):
        metrics = MetricExtractor().extract(build_landmarks(with_pose=False), blink_rate=15)
        assert metrics.head_pose.pitch == 0.0
        assert metrics.drowsiness_indicators.head_dropping is False

    def test_ranges(self):
        metrics = MetricExtractor().extract(build_landmarks(), blink_rate=15)
        for value in (metrics.eye_strain, metrics.facial_tension,
                      metrics.skin_analysis.pallor, metrics.skin_analysis.darkness):
            assert 0.0 <= value <= 100.0
