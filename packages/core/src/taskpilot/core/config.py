"""配置常量模块 -- 可通过环境变量覆盖

包含数据库路径、存储后端选择、字段长度限制、SSE 心跳间隔等可配置常量。
"""

import os
from pathlib import Path
from typing import Literal

import structlog

log = structlog.get_logger()

StoreBackend = Literal["memory", "sqlite"]

_VALID_BACKENDS: tuple[str, ...] = ("memory", "sqlite")


def _get_base_dir() -> Path:
    """获取项目 data 基础目录"""
    return Path(os.environ.get("TASKPILOT_DATA_DIR", "data"))


def _env_int(name: str, default: int) -> int:
    """读取整数环境变量，非法值回退默认值"""
    raw = os.environ.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        log.warning("invalid_int_config", env_var=name, value=raw, fallback=default)
        return default


def get_db_path() -> str:
    """获取 SQLite 数据库路径"""
    return os.environ.get(
        "TASKPILOT_DB_PATH",
        str(_get_base_dir() / "sqlite" / "taskpilot.db"),
    )


def get_store_backend() -> StoreBackend:
    """获取任务存储后端

    启动时一次性决定：memory（演示/离线模式）或 sqlite（持久化）。
    调用方不再自行探测环境。
    """
    raw = os.environ.get("TASKPILOT_STORE_BACKEND", "memory").strip().lower()
    if raw not in _VALID_BACKENDS:
        log.warning(
            "invalid_store_backend",
            env_var="TASKPILOT_STORE_BACKEND",
            value=raw,
            fallback="memory",
        )
        return "memory"
    return raw  # type: ignore[return-value]


# 标题最大长度
TITLE_MAX_LENGTH: int = 200

# 描述最大长度
DESCRIPTION_MAX_LENGTH: int = 1000

# 找不到任务时返回的候选任务数量
CANDIDATE_SAMPLE_SIZE: int = 5

# SSE 心跳间隔（秒）
SSE_HEARTBEAT_INTERVAL: int = _env_int("TASKPILOT_SSE_HEARTBEAT_INTERVAL", 15)
