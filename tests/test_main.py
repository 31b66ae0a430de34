"""Tests for main.py AnalysisSystem - strategy wiring, report formatting and CLI exit codes."""

import json
import random

import pytest

import main
from analysis.config import DEFAULT_CONFIG
from analysis.strategies import DemoAnalysisStrategy, LandmarkAnalysisStrategy
from detectors.fixture_detector import FixtureFaceDetector
from main import AnalysisSystem, format_report

from landmark_factory import build_face


def _fake_frames(source, count=5, interval_ms=400.0):
    return [(i * interval_ms, None) for i in range(count)]


@pytest.fixture
def fixture_detector():
    return FixtureFaceDetector([build_face(ear=0.3), build_face(ear=0.1)])


class TestAnalysisSystemInit:
    def test_landmark_mode_uses_given_detector(self, fixture_detector):
        system = AnalysisSystem(detector=fixture_detector)
        assert system.detector is fixture_detector
        assert isinstance(system.strategy, LandmarkAnalysisStrategy)
        assert system.config == DEFAULT_CONFIG

    def test_demo_mode_has_no_detector(self):
        system = AnalysisSystem(mode="demo")
        assert system.detector is None
        assert isinstance(system.strategy, DemoAnalysisStrategy)

    def test_config_file_applied(self, tmp_path, fixture_detector):
        cfg_file = tmp_path / "config.json"
        cfg_file.write_text(json.dumps({"sample_frames": 3}), encoding="utf-8")
        system = AnalysisSystem(config_path=str(cfg_file), detector=fixture_detector)
        assert system.config["sample_frames"] == 3

    def test_unknown_mode(self):
        with pytest.raises(ValueError):
            AnalysisSystem(mode="random")


class TestRun:
    def test_landmark_run(self, monkeypatch, fixture_detector):
        monkeypatch.setattr(main, "sample_frames", _fake_frames)
        report = AnalysisSystem(detector=fixture_detector).run("video.mp4")

        assert report.mode == "landmark"
        assert report.enhanced_analysis.frame_count == DEFAULT_CONFIG["sample_frames"]

    def test_frame_count_override(self, monkeypatch, fixture_detector):
        monkeypatch.setattr(main, "sample_frames", _fake_frames)
        report = AnalysisSystem(detector=fixture_detector).run(0, frame_count=2)
        assert report.enhanced_analysis.frame_count == 2

    def test_demo_run_skips_sampling(self, monkeypatch):
        def _fail(*args, **kwargs):
            raise AssertionError("demo 模式不应采样视频")

        monkeypatch.setattr(main, "sample_frames", _fail)
        system = AnalysisSystem(mode="demo")
        system.strategy.rng = random.Random(0)
        report = system.run()
        assert report.mode == "demo"
        assert 30 <= report.energy_level <= 100

    def test_stop_closes_detector(self, fixture_detector, monkeypatch):
        closed = []
        monkeypatch.setattr(fixture_detector, "close", lambda: closed.append(True))
        AnalysisSystem(detector=fixture_detector).stop()
        assert closed == [True]


class TestFormatReport:
    def test_landmark_report(self, monkeypatch, fixture_detector):
        monkeypatch.setattr(main, "sample_frames", _fake_frames)
        report = AnalysisSystem(detector=fixture_detector).run(0)
        text = format_report(report)

        assert "精力值" in text
        assert "疲劳分数" in text
        for recommendation in report.enhanced_analysis.recommendations:
            assert recommendation in text

    def test_demo_report(self):
        report = DemoAnalysisStrategy(rng=random.Random(5)).analyze()
        text = format_report(report)
        assert report.detailed_analysis.recommendation in text
        assert "疲劳分数" not in text


class TestMainCli:
    def test_demo_json_output(self, capsys):
        main.main(["--mode", "demo", "--json"])
        data = json.loads(capsys.readouterr().out)
        assert data["mode"] == "demo"
        assert data["enhanced_analysis"] is None

    def test_video_open_failure_exits(self, monkeypatch, fixture_detector, capsys):
        def _raise(*args, **kwargs):
            raise IOError("无法打开视频源: missing.mp4")

        monkeypatch.setattr(AnalysisSystem, "_create_detector", staticmethod(lambda: fixture_detector))
        monkeypatch.setattr(main, "sample_frames", _raise)

        with pytest.raises(SystemExit) as exc_info:
            main.main(["--video", "missing.mp4"])
        assert exc_info.value.code == 1
        assert "missing.mp4" in capsys.readouterr().out

    def test_no_face_exits(self, monkeypatch, capsys):
        empty = FixtureFaceDetector([None])
        monkeypatch.setattr(AnalysisSystem, "_create_detector", staticmethod(lambda: empty))
        monkeypatch.setattr(main, "sample_frames", _fake_frames)

        with pytest.raises(SystemExit) as exc_info:
            main.main(["--camera", "0"])
        assert exc_info.value.code == 1
        assert "分析失败" in capsys.readouterr().out

    def test_text_output(self, monkeypatch, fixture_detector, capsys):
        monkeypatch.setattr(AnalysisSystem, "_create_detector", staticmethod(lambda: fixture_detector))
        monkeypatch.setattr(main, "sample_frames", _fake_frames)

        main.main(["--frames", "3"])
        out = capsys.readouterr().out
        assert "精力值" in out
        assert "有效帧: 3" in out


def _write_landmarks(tmp_path, faces):
    frames = []
    for face in faces:
        if face is None:
            frames.append({"face_detected": False})
            continue
        frames.append({
            "landmarks": [None if p is None else [p.x, p.y] for p in face.landmarks],
            "confidence": face.confidence,
        })
    path = tmp_path / "landmarks.json"
    path.write_text(json.dumps({"frames": frames}), encoding="utf-8")
    return str(path)


class TestLandmarkReplay:
    def test_replay_uses_every_recorded_frame(self, tmp_path, monkeypatch):
        def _fail(*args, **kwargs):
            raise AssertionError("回放模式不应读取视频")

        monkeypatch.setattr(main, "sample_frames", _fail)
        path = _write_landmarks(tmp_path, [build_face(), None, build_face(ear=0.1)])

        system = AnalysisSystem(landmarks_path=path)
        report = system.run()

        assert isinstance(system.detector, FixtureFaceDetector)
        assert report.enhanced_analysis.frame_count == 2

    def test_replay_cli_json(self, tmp_path, capsys):
        path = _write_landmarks(tmp_path, [build_face(), build_face()])
        main.main(["--landmarks", path, "--json"])
        data = json.loads(capsys.readouterr().out)
        assert data["enhanced_analysis"]["frame_count"] == 2

    def test_missing_landmark_file_exits(self, tmp_path, capsys):
        with pytest.raises(SystemExit) as exc_info:
            main.main(["--landmarks", str(tmp_path / "missing.json")])
        assert exc_info.value.code == 1
        assert "错误" in capsys.readouterr().out

    def test_malformed_landmark_file_exits(self, tmp_path, capsys):
        path = tmp_path / "bad.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(SystemExit) as exc_info:
            main.main(["--landmarks", str(path)])
        assert exc_info.value.code == 1
        assert "关键点文件格式错误" in capsys.readouterr().out


class TestVerify:
    def test_verify_with_replay(self, tmp_path):
        path = _write_landmarks(tmp_path, [build_face(confidence=0.9)] * 5)
        result = AnalysisSystem(landmarks_path=path).verify()
        assert result.is_working is True
        assert result.total_frames == DEFAULT_CONFIG["verify_frames"]

    def test_verify_samples_camera(self, monkeypatch, fixture_detector):
        calls = []

        def _record(source, count=5, interval_ms=400.0):
            calls.append((source, count, interval_ms))
            return _fake_frames(source, count, interval_ms)

        monkeypatch.setattr(main, "sample_frames", _record)
        result = AnalysisSystem(detector=fixture_detector).verify(1)

        assert calls == [(1, DEFAULT_CONFIG["verify_frames"], DEFAULT_CONFIG["verify_interval_ms"])]
        assert result.successful_frames == DEFAULT_CONFIG["verify_frames"]

    def test_verify_requires_landmark_mode(self):
        with pytest.raises(ValueError):
            AnalysisSystem(mode="demo").verify()

    def test_verify_cli_text(self, tmp_path, capsys):
        path = _write_landmarks(tmp_path, [None] * 5)
        main.main(["--landmarks", path, "--verify"])
        out = capsys.readouterr().out
        assert "摄像头状态: 异常" in out
        assert "检测成功: 0/5 帧" in out

    def test_verify_demo_rejected(self):
        with pytest.raises(SystemExit) as exc_info:
            main.main(["--mode", "demo", "--verify"])
        assert exc_info.value.code == 2
