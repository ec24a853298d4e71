"""枚举定义

包含链接状态、任务聚合状态、日志级别、流事件状态与 stage 层级枚举，
以及外部状态字符串的归一化入口。
"""

from enum import StrEnum


class LinkStatus(StrEnum):
    """单条链接的处理状态"""

    PENDING = "pending"
    PROCESSING = "processing"
    DONE = "done"
    ERROR = "error"


# 已有结论的链接状态（成功或失败）
RESOLVED_LINK_STATES: set[LinkStatus] = {LinkStatus.DONE, LinkStatus.ERROR}

# 历史数据中出现过的状态别名
_LINK_STATUS_ALIASES: dict[str, LinkStatus] = {
    "success": LinkStatus.DONE,
    "completed": LinkStatus.DONE,
    "failed": LinkStatus.ERROR,
    "fail": LinkStatus.ERROR,
    "": LinkStatus.PENDING,
}


def normalize_link_status(value: object) -> LinkStatus:
    """将外部状态字符串归一化为 LinkStatus

    None、空串与未知值一律视为 PENDING。
    """
    if isinstance(value, LinkStatus):
        return value
    text = str(value or "").strip().lower()
    if text in _LINK_STATUS_ALIASES:
        return _LINK_STATUS_ALIASES[text]
    try:
        return LinkStatus(text)
    except ValueError:
        return LinkStatus.PENDING


class TaskStatus(StrEnum):
    """任务聚合状态 -- 由全部链接状态推导，不单独设置"""

    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"


TERMINAL_STATES: set[TaskStatus] = {TaskStatus.COMPLETED, TaskStatus.FAILED}


class LogLevel(StrEnum):
    """进度日志级别"""

    INFO = "info"
    SUCCESS = "success"
    WARN = "warn"
    ERROR = "error"


class StreamStatus(StrEnum):
    """流事件携带的状态标记"""

    PROCESSING = "processing"
    DONE = "done"
    ERROR = "error"
    FINISHED = "finished"


class StageTier(StrEnum):
    """stage 层级 -- 按声明顺序求值"""

    # 广告/倒计时跳转页
    TIMER = "timer"
    # 第一层中转页（hblinks 族）
    INTERMEDIATE_A = "intermediate_a"
    # 第二层中转页（hubdrive 族）
    INTERMEDIATE_B = "intermediate_b"
    # 直链解析层（hubcloud / hubcdn 族）
    FINAL = "final"
