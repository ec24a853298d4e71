"""Store Protocol 接口定义

使用 Python Protocol 实现结构化子类型（duck typing），
Reconciler 与 TaskService 只依赖此接口。
"""

from typing import Any, Protocol

from ..models.task import Task


class TaskStore(Protocol):
    """Task 文档存储接口 -- 非事务、均可能失败"""

    async def create_task(self, task: Task) -> None:
        """创建任务记录"""
        ...

    async def get_task(self, task_id: str) -> Task | None:
        """根据 task_id 查询任务"""
        ...

    async def find_task_by_url(self, url: str) -> Task | None:
        """按来源页面 URL 查询任务"""
        ...

    async def list_tasks(self, status: str | None = None) -> list[Task]:
        """查询任务列表，支持按状态筛选"""
        ...

    async def update_task(self, task_id: str, changes: dict[str, Any]) -> bool:
        """部分更新任务文档"""
        ...

    async def delete_task(self, task_id: str) -> bool:
        """删除任务"""
        ...
