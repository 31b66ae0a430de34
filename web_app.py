"""Flask HTTP 接口 - 按会话接收关键点数据并返回疲劳分析结果"""

import logging
import threading
import uuid

from flask import Flask, jsonify, request

from analysis.config import load_config
from analysis.history import ReportHistory
from analysis.session import FaceAnalysisSession
from analysis.strategies import DemoAnalysisStrategy
from analysis.verification import verify_capabilities
from detectors.fixture_detector import FixtureFaceDetector, parse_detected_face
from evaluators.report_builder import build_report

logger = logging.getLogger(__name__)

app = Flask(__name__)


class SessionManager:
    """管理多个独立分析会话，每个会话的帧更新由各自的锁串行化。"""

    MAX_SESSIONS = 100

    def __init__(self, config=None):
        self.config = config
        self._sessions = {}
        self._locks = {}
        self._lock = threading.Lock()

    def create(self):
        session_id = uuid.uuid4().hex
        with self._lock:
            if len(self._sessions) >= self.MAX_SESSIONS:
                # 淘汰最早创建的会话
                oldest = next(iter(self._sessions))
                self._sessions.pop(oldest)
                self._locks.pop(oldest)
                logger.warning("会话数量达到上限，已丢弃会话 %s", oldest)
            self._sessions[session_id] = FaceAnalysisSession(self.config)
            self._locks[session_id] = threading.Lock()
        logger.info("创建分析会话 %s", session_id)
        return session_id

    def get(self, session_id):
        """返回 (会话, 会话锁)，会话不存在时抛出 KeyError。"""
        with self._lock:
            return self._sessions[session_id], self._locks[session_id]

    def remove(self, session_id):
        with self._lock:
            self._locks.pop(session_id, None)
            return self._sessions.pop(session_id, None) is not None

    def __len__(self):
        with self._lock:
            return len(self._sessions)


_config = load_config()
manager = SessionManager(_config)
history = ReportHistory(retention_days=_config["history_retention_days"])


def _not_found(session_id):
    return jsonify({"success": False, "message": f"会话不存在: {session_id}"}), 404


def _bad_request(message):
    return jsonify({"success": False, "message": message}), 400


# ---- Flask 路由 ----

@app.route("/api/sessions", methods=["POST"])
def api_create_session():
    session_id = manager.create()
    return jsonify({"success": True, "session_id": session_id}), 201


@app.route("/api/sessions/<session_id>/frames", methods=["POST"])
def api_add_frame(session_id):
    try:
        session, lock = manager.get(session_id)
    except KeyError:
        return _not_found(session_id)

    data = request.get_json(force=True, silent=True)
    if not isinstance(data, dict):
        return _bad_request("请求体必须为 JSON 对象")

    try:
        face = parse_detected_face(data)
        timestamp = data.get("timestamp")
        timestamp = float(timestamp) if timestamp is not None else None
    except (KeyError, TypeError, ValueError) as e:
        return _bad_request(f"关键点数据格式错误: {e}")

    with lock:
        result = session.analyze_timed(face, now=timestamp)

    if result is None:
        return jsonify({"success": True, "face_detected": False})

    return jsonify({"success": True, "face_detected": True, "result": result.to_dict()})


@app.route("/api/sessions/<session_id>/performance")
def api_performance(session_id):
    try:
        session, lock = manager.get(session_id)
    except KeyError:
        return _not_found(session_id)

    with lock:
        metrics = session.performance_metrics()
        frames = len(session.results)
    return jsonify({"success": True, "frames": frames, "performance": metrics.to_dict()})


@app.route("/api/sessions/<session_id>/finish", methods=["POST"])
def api_finish_session(session_id):
    try:
        session, lock = manager.get(session_id)
    except KeyError:
        return _not_found(session_id)

    with lock:
        try:
            session_result = session.finish()
        except ValueError as e:
            return _bad_request(str(e))

    manager.remove(session_id)
    report = build_report(session_result)
    history.add(report)
    return jsonify({"success": True, "report": report.to_dict()})


@app.route("/api/sessions/<session_id>", methods=["DELETE"])
def api_delete_session(session_id):
    if not manager.remove(session_id):
        return _not_found(session_id)
    return jsonify({"success": True, "message": "会话已删除"})


@app.route("/api/demo", methods=["POST"])
def api_demo():
    report = DemoAnalysisStrategy().analyze()
    history.add(report)
    return jsonify({"success": True, "report": report.to_dict()})


@app.route("/api/verify", methods=["POST"])
def api_verify():
    """客户端提交若干测试帧的检测结果，返回摄像头自检结论。"""
    data = request.get_json(force=True, silent=True)
    if not isinstance(data, dict) or not isinstance(data.get("frames"), list):
        return _bad_request("请求体必须包含 frames 列表")

    try:
        faces = [parse_detected_face(item) for item in data["frames"]]
    except (AttributeError, KeyError, TypeError, ValueError) as e:
        return _bad_request(f"关键点数据格式错误: {e}")

    frames = [(i * _config["verify_interval_ms"], None) for i in range(len(faces))]
    result = verify_capabilities(FixtureFaceDetector(faces, loop=False), frames, _config)
    return jsonify({"success": True, "verification": result.to_dict()})


@app.route("/api/history")
def api_history():
    try:
        days = int(request.args.get("days", 7))
    except ValueError:
        return _bad_request("days 必须为整数")
    if days < 1:
        return _bad_request("days 必须为正整数")

    return jsonify({
        "success": True,
        "count": len(history),
        "days": [item.to_dict() for item in history.summary(days=days)],
    })


@app.route("/api/history", methods=["DELETE"])
def api_clear_history():
    history.clear()
    return jsonify({"success": True, "message": "历史记录已清空"})


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    app.run(host="0.0.0.0", port=5000, debug=False, threaded=True)
