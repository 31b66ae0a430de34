"""疲劳分析系统命令行入口"""

import argparse
import json
import logging
import sys

from analysis.config import load_config
from analysis.strategies import MODES, create_strategy
from analysis.verification import verify_capabilities
from analysis.video_source import sample_frames
from detectors.fixture_detector import FixtureFaceDetector

logger = logging.getLogger(__name__)


class AnalysisSystem:
    """疲劳分析系统主程序，负责创建检测器、采样视频帧并运行分析策略。"""

    def __init__(self, mode="landmark", config_path=None, detector=None, landmarks_path=None):
        """
        Args:
            mode: 分析模式 landmark / demo
            config_path: JSON 参数配置文件路径
            detector: 自定义人脸检测器，缺省使用 MediaPipe
            landmarks_path: 预先采集的关键点 JSON 文件，指定后回放该文件而不读取视频
        """
        self.mode = mode
        self.config = load_config(config_path)
        self.replay = landmarks_path is not None

        self.detector = None
        if mode == "landmark":
            if detector is None:
                if self.replay:
                    detector = FixtureFaceDetector.from_json(landmarks_path, loop=False)
                else:
                    detector = self._create_detector()
            self.detector = detector

        self.strategy = create_strategy(mode, detector=self.detector, config=self.config)

    @staticmethod
    def _create_detector():
        """创建 MediaPipe 人脸检测器。"""
        from detectors.face_detector import MediaPipeFaceDetector
        return MediaPipeFaceDetector()

    def _read_frames(self, source, count, interval_ms):
        """回放模式按间隔生成时间戳，图像帧为空；否则从视频源采样。"""
        if self.replay:
            return [(i * interval_ms, None) for i in range(count)]
        return sample_frames(source, count=count, interval_ms=interval_ms)

    def run(self, source=0, frame_count=None):
        """
        采样视频帧并生成分析报告。

        Args:
            source: 视频文件路径或摄像头编号
            frame_count: 采样帧数，缺省使用配置值；回放模式缺省为文件中的帧数

        Returns:
            RestAnalysisResult
        """
        if self.mode == "demo":
            return self.strategy.analyze()

        if frame_count is None:
            frame_count = len(self.detector) if self.replay else self.config["sample_frames"]

        frames = self._read_frames(source, frame_count, self.config["sample_interval_ms"])
        return self.strategy.analyze(frames)

    def verify(self, source=0):
        """
        摄像头自检。

        Returns:
            VerificationResult

        Raises:
            ValueError: demo 模式没有检测器
        """
        if self.detector is None:
            raise ValueError("摄像头自检需要 landmark 模式")

        frames = self._read_frames(source, self.config["verify_frames"], self.config["verify_interval_ms"])
        return verify_capabilities(self.detector, frames, self.config)

    def stop(self):
        """关闭人脸检测器。"""
        if self.detector is not None:
            self.detector.close()


def format_report(report):
    """将报告格式化为终端输出文本。"""
    lines = [
        f"精力值: {report.energy_level:.0f}%",
        f"需要休息: {'是' if report.needs_rest else '否'}",
        f"需要睡眠: {'是' if report.needs_sleep else '否'}",
        report.message,
    ]
    session = report.enhanced_analysis
    if session is not None:
        lines.append(f"疲劳分数: {session.fatigue_score:.1f} (趋势: {session.trend}, 有效帧: {session.frame_count})")
        lines.append("建议:")
        lines.extend(f"  - {text}" for text in session.recommendations)
    elif report.detailed_analysis is not None:
        lines.append(f"建议: {report.detailed_analysis.recommendation}")
    return "\n".join(lines)


def format_verification(result):
    """将自检结果格式化为终端输出文本。"""
    lines = [
        f"摄像头状态: {'正常' if result.is_working else '异常'}",
        f"检测成功: {result.successful_frames}/{result.total_frames} 帧",
        f"检测准确度: {result.accuracy:.0f}%",
        f"处理性能: {result.performance:.0f}%",
        "建议:",
    ]
    lines.extend(f"  - {text}" for text in result.recommendations)
    return "\n".join(lines)


def main(argv=None):
    parser = argparse.ArgumentParser(description="面部疲劳分析系统")
    parser.add_argument(
        "--mode",
        choices=MODES,
        default="landmark",
        help="分析模式: landmark(关键点评分), demo(随机演示)",
    )
    source_group = parser.add_mutually_exclusive_group()
    source_group.add_argument("--video", type=str, default=None, help="视频文件路径")
    source_group.add_argument("--camera", type=int, default=0, help="摄像头编号")
    source_group.add_argument("--landmarks", type=str, default=None, help="回放预先采集的关键点 JSON 文件")
    parser.add_argument("--frames", type=int, default=None, help="采样帧数")
    parser.add_argument("--config", type=str, default=None, help="JSON 参数配置文件路径")
    parser.add_argument("--verify", action="store_true", help="只做摄像头检测能力自检")
    parser.add_argument("--json", action="store_true", help="以 JSON 格式输出报告")
    parser.add_argument("--verbose", action="store_true", help="输出调试日志")
    args = parser.parse_args(argv)

    if args.verify and args.mode == "demo":
        parser.error("--verify 需要 landmark 模式")

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        system = AnalysisSystem(mode=args.mode, config_path=args.config, landmarks_path=args.landmarks)
    except IOError as e:
        print(f"错误: {e}")
        sys.exit(1)
    except (KeyError, ValueError) as e:
        print(f"关键点文件格式错误: {e}")
        sys.exit(1)

    source = args.video if args.video is not None else args.camera

    try:
        if args.verify:
            result = system.verify(source)
        else:
            result = system.run(source, frame_count=args.frames)
    except IOError as e:
        print(f"错误: {e}")
        sys.exit(1)
    except ValueError as e:
        print(f"分析失败: {e}")
        sys.exit(1)
    finally:
        system.stop()

    if args.json:
        print(json.dumps(result.to_dict(), indent=2, ensure_ascii=False))
    elif args.verify:
        print(format_verification(result))
    else:
        print(format_report(result))


if __name__ == "__main__":
    main()
