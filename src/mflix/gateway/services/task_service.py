"""TaskService -- 任务创建/合并/查询/删除

创建流程：
1. 扫描来源页面，得到候选链接与预览/元数据
2. 同一 URL 已有任务时，只追加新出现的链接（pending），已有链接保持原状
3. 否则创建新任务，全部链接 pending
"""

from datetime import UTC, datetime

import structlog
from mflix.core.models import LinkStatus, Task, TaskLink
from mflix.core.projection import project_task
from mflix.core.store import StoreGroup
from mflix.solvers import PageScanner
from ulid import ULID

log = structlog.get_logger()


class TaskService:
    """任务业务服务"""

    def __init__(self, store_group: StoreGroup, scanner: PageScanner | None = None) -> None:
        self._stores = store_group
        self._scanner = scanner

    async def create_or_merge(self, url: str) -> tuple[Task, bool]:
        """扫描页面并创建任务（或合并进已有任务）

        Returns:
            (task, created) -- created=False 表示合并进了同 URL 的已有任务

        Raises:
            ScanError: 页面扫描失败
            PersistenceError: 写入失败
        """
        if self._scanner is None:
            raise RuntimeError("TaskService was created without a page scanner")

        scan = await self._scanner.scan(url)
        now = datetime.now(UTC)
        scanned = [
            TaskLink(name=item.name, link=item.link, status=LinkStatus.PENDING)
            for item in scan.links
        ]

        existing = await self._stores.task_store.find_task_by_url(url)
        if existing is not None:
            known = {link.link for link in existing.links}
            added = [link for link in scanned if link.link not in known]
            projected = project_task(existing, [*existing.links, *added], now=now)
            if not added:
                # 没有新链接时保留原有 completed_at
                projected = projected.model_copy(
                    update={"completed_at": existing.completed_at}
                )
            await self._stores.task_store.update_task(
                existing.task_id,
                {
                    "links": projected.links,
                    "status": projected.status,
                    "completed_at": projected.completed_at,
                    "updated_at": projected.updated_at,
                    "preview": scan.preview,
                    "metadata": scan.metadata,
                },
            )
            log.info(
                "task_merged",
                task_id=existing.task_id,
                added=len(added),
                total_links=len(projected.links),
            )
            return (
                projected.model_copy(update={"preview": scan.preview, "metadata": scan.metadata}),
                False,
            )

        task = project_task(
            Task(
                task_id=str(ULID()),
                url=url,
                created_at=now,
                updated_at=now,
                preview=scan.preview,
                metadata=scan.metadata,
            ),
            scanned,
            now=now,
        )
        await self._stores.task_store.create_task(task)
        log.info("task_created", task_id=task.task_id, link_count=len(scanned))
        return task, True

    async def get_task(self, task_id: str) -> Task | None:
        return await self._stores.task_store.get_task(task_id)

    async def list_tasks(self, status: str | None = None) -> list[Task]:
        """查询任务列表，按 created_at 倒序"""
        return await self._stores.task_store.list_tasks(status)

    async def delete_task(self, task_id: str) -> bool:
        deleted = await self._stores.task_store.delete_task(task_id)
        if deleted:
            log.info("task_deleted", task_id=task_id)
        return deleted
