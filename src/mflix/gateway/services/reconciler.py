"""Reconciler -- 批次结束后把结果合并回任务文档

读一次、写一次，不加锁：同一任务的并发批次以最后一次写入为准。
所有失败只记录日志，不向调用方抛出（此时流已交付完毕）。
"""

from collections.abc import Iterable

import structlog
from mflix.core.models import LinkResult, Task
from mflix.core.projection import merge_link_results, project_task
from mflix.core.store import PersistenceError, TaskStore

log = structlog.get_logger()


class Reconciler:
    """任务文档合并器"""

    def __init__(self, task_store: TaskStore) -> None:
        self._task_store = task_store

    async def reconcile(self, task_id: str, results: Iterable[LinkResult]) -> Task | None:
        """合并批次结果并重算任务状态

        Returns:
            写入后的任务投影；任务不存在或写入失败时返回 None
        """
        results = list(results)
        try:
            task = await self._task_store.get_task(task_id)
        except Exception as e:
            log.error(
                "reconcile_load_failed",
                task_id=task_id,
                error_type=type(e).__name__,
                error=str(e),
            )
            return None

        if task is None:
            log.error("reconcile_task_missing", task_id=task_id, result_count=len(results))
            return None

        links = merge_link_results(task.links, results)
        projected = project_task(task, links)

        try:
            updated = await self._task_store.update_task(
                task_id,
                {
                    "links": projected.links,
                    "status": projected.status,
                    "completed_at": projected.completed_at,
                    "updated_at": projected.updated_at,
                },
            )
        except PersistenceError as e:
            log.error(
                "reconcile_write_failed",
                task_id=task_id,
                error_type=type(e.original_error).__name__,
                error=str(e.original_error),
            )
            return None
        except Exception as e:
            # 例如关闭后的连接: ValueError("no active connection")
            log.error(
                "reconcile_write_failed",
                task_id=task_id,
                error_type=type(e).__name__,
                error=str(e),
            )
            return None

        if not updated:
            # 读写之间任务被删除
            log.error("reconcile_task_missing", task_id=task_id, result_count=len(results))
            return None

        log.info(
            "task_reconciled",
            task_id=task_id,
            status=projected.status.value,
            merged=len(results),
            total_links=len(links),
        )
        return projected
