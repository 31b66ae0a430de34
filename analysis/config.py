"""分析参数配置：默认值 + JSON 配置文件覆盖"""

import json
import logging
from typing import Optional

logger = logging.getLogger(__name__)

# 默认参数
DEFAULT_CONFIG = {
    "blink_threshold": 0.25,
    "blink_debounce_ms": 200.0,
    "blink_window_ms": 60000.0,
    "history_size": 30,
    "trend_window": 5,
    "trend_dead_band": 5.0,
    "sample_frames": 5,
    "sample_interval_ms": 400.0,
    "verify_frames": 5,
    "verify_interval_ms": 200.0,
    "history_retention_days": 30,
}


def merge_config(overrides: Optional[dict] = None) -> dict:
    """用 overrides 中的非空已知字段覆盖默认值，未知字段忽略。"""
    config = dict(DEFAULT_CONFIG)
    if not overrides:
        return config

    for key in DEFAULT_CONFIG:
        if key in overrides and overrides[key] is not None:
            config[key] = overrides[key]
    return config


def load_config(config_path: Optional[str] = None) -> dict:
    """从 JSON 配置文件加载参数，文件缺失或格式错误时使用默认值。"""
    if config_path is None:
        return dict(DEFAULT_CONFIG)

    try:
        with open(config_path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except FileNotFoundError:
        logger.warning("配置文件不存在 %s，使用默认参数", config_path)
        return dict(DEFAULT_CONFIG)
    except json.JSONDecodeError:
        logger.warning("配置文件格式错误 %s，使用默认参数", config_path)
        return dict(DEFAULT_CONFIG)

    if not isinstance(data, dict):
        logger.warning("配置文件内容应为 JSON 对象 %s，使用默认参数", config_path)
        return dict(DEFAULT_CONFIG)

    return merge_config(data)
