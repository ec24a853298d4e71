"""Mflix Core Domain Models -- 公共类型导出

所有公共模型类型从此入口导入。
"""

from .enums import (
    RESOLVED_LINK_STATES,
    TERMINAL_STATES,
    LinkStatus,
    LogLevel,
    StageTier,
    StreamStatus,
    TaskStatus,
    normalize_link_status,
)
from .event import ResolutionEvent
from .link import AlternativeButton, LinkItem, LinkResult, LogEntry
from .task import MovieMetadata, MoviePreview, Task, TaskLink

__all__ = [
    # 枚举
    "LinkStatus",
    "TaskStatus",
    "LogLevel",
    "StreamStatus",
    "StageTier",
    "RESOLVED_LINK_STATES",
    "TERMINAL_STATES",
    "normalize_link_status",
    # 链接
    "LinkItem",
    "LinkResult",
    "LogEntry",
    "AlternativeButton",
    # 事件
    "ResolutionEvent",
    # 任务
    "Task",
    "TaskLink",
    "MoviePreview",
    "MovieMetadata",
]
