"""配置常量模块 -- 可通过环境变量覆盖

包含数据库路径、数据目录、流式推送心跳间隔等可配置常量。
"""

import os
from pathlib import Path


def get_data_dir() -> Path:
    """获取项目 data 基础目录"""
    return Path(os.environ.get("MFLIX_DATA_DIR", "data"))


def get_db_path() -> str:
    """获取 SQLite 数据库路径"""
    return os.environ.get(
        "MFLIX_DB_PATH",
        str(get_data_dir() / "sqlite" / "mflix.db"),
    )


# SSE 心跳间隔（秒），仅 text/event-stream 模式使用
SSE_PING_INTERVAL: int = int(os.environ.get("MFLIX_SSE_PING_INTERVAL", "15"))

# 计时跳转页最多连续绕过次数
MAX_TIMER_HOPS: int = 3

# 单条链接名称最大长度
LINK_NAME_MAX_LENGTH: int = 50
