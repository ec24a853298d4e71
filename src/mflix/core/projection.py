"""任务投影模块 -- 合并批次结果并推导任务聚合状态

task.status 只由链接状态推导：
- 仍有未出结论的链接 -> processing
- 全部出结论且至少一条成功 -> completed
- 全部出结论且无成功 -> failed
"""

from collections.abc import Iterable
from datetime import UTC, datetime

from .models.enums import TERMINAL_STATES, LinkStatus, TaskStatus
from .models.link import LinkResult
from .models.task import Task, TaskLink


def aggregate_task_status(links: Iterable[TaskLink]) -> TaskStatus:
    """根据全部链接状态计算任务状态"""
    links = list(links)
    if not all(link.resolved for link in links):
        return TaskStatus.PROCESSING
    if any(link.status == LinkStatus.DONE for link in links):
        return TaskStatus.COMPLETED
    return TaskStatus.FAILED


def merge_link_results(
    stored_links: list[TaskLink],
    results: Iterable[LinkResult],
) -> list[TaskLink]:
    """按原始 URL 将批次结果合并到已存储的链接列表

    匹配键是 TaskLink.link == LinkResult.original_link，与批次内位置无关。
    未匹配的条目原样保留（同一对象）。final_link 与附加字段仅在新结果提供时覆盖，
    重试失败不会抹掉已有直链。
    """
    by_original: dict[str, LinkResult] = {}
    for result in results:
        if result.original_link and result.original_link not in by_original:
            by_original[result.original_link] = result

    merged: list[TaskLink] = []
    for stored in stored_links:
        result = by_original.get(stored.link)
        if result is None:
            merged.append(stored)
            continue

        update: dict = {
            "status": result.status,
            "error": result.error,
            "logs": list(result.logs),
        }
        if result.final_link:
            update["final_link"] = result.final_link
        if result.best_button_name:
            update["best_button_name"] = result.best_button_name
        if result.all_available_buttons:
            update["all_available_buttons"] = list(result.all_available_buttons)
        merged.append(stored.model_copy(update=update))
    return merged


def project_task(
    task: Task,
    links: list[TaskLink],
    now: datetime | None = None,
) -> Task:
    """以新的链接列表重建任务投影（status + completed_at）"""
    status = aggregate_task_status(links)
    terminal = status in TERMINAL_STATES
    ts = now or datetime.now(UTC)
    return task.model_copy(
        update={
            "links": links,
            "status": status,
            "completed_at": ts if terminal else None,
            "updated_at": ts,
        }
    )
