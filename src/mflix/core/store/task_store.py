"""TaskStore SQLite 实现

任务文档的 get / update-by-id 存储；links 等嵌套结构以 JSON 文本保存。
写入不加锁：同一任务的并发批次以最后一次写入为准。
"""

import json
from datetime import datetime
from typing import Any

import aiosqlite

from ..models.enums import TaskStatus
from ..models.task import MovieMetadata, MoviePreview, Task, TaskLink

_COLUMNS = (
    "task_id, url, status, created_at, updated_at, completed_at, "
    "links, preview, metadata, error"
)

# update_task 允许写入的字段
_UPDATABLE_FIELDS = {
    "status",
    "links",
    "completed_at",
    "updated_at",
    "preview",
    "metadata",
    "error",
}


class PersistenceError(Exception):
    """存储不可达或写入被拒绝"""

    def __init__(self, task_id: str, original_error: Exception) -> None:
        super().__init__(f"Failed to persist task {task_id}: {original_error}")
        self.task_id = task_id
        self.original_error = original_error


class SqliteTaskStore:
    """TaskStore 的 SQLite 实现"""

    def __init__(self, conn: aiosqlite.Connection) -> None:
        self._conn = conn

    async def create_task(self, task: Task) -> None:
        """创建任务记录"""
        try:
            await self._conn.execute(
                f"INSERT INTO tasks ({_COLUMNS}) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)",
                (
                    task.task_id,
                    task.url,
                    task.status.value,
                    task.created_at.isoformat(),
                    task.updated_at.isoformat(),
                    task.completed_at.isoformat() if task.completed_at else None,
                    _dump_links(task.links),
                    _dump_optional(task.preview),
                    _dump_optional(task.metadata),
                    task.error,
                ),
            )
            await self._conn.commit()
        except aiosqlite.Error as e:
            await self._conn.rollback()
            raise PersistenceError(task.task_id, e) from e

    async def get_task(self, task_id: str) -> Task | None:
        """根据 task_id 查询任务"""
        cursor = await self._conn.execute(
            f"SELECT {_COLUMNS} FROM tasks WHERE task_id = ?",
            (task_id,),
        )
        row = await cursor.fetchone()
        if row is None:
            return None
        return self._row_to_task(row)

    async def find_task_by_url(self, url: str) -> Task | None:
        """按来源页面 URL 查询最近创建的任务"""
        cursor = await self._conn.execute(
            f"SELECT {_COLUMNS} FROM tasks WHERE url = ? ORDER BY created_at DESC LIMIT 1",
            (url,),
        )
        row = await cursor.fetchone()
        if row is None:
            return None
        return self._row_to_task(row)

    async def list_tasks(self, status: str | None = None) -> list[Task]:
        """查询任务列表，支持按状态筛选，按 created_at 倒序"""
        if status:
            cursor = await self._conn.execute(
                f"SELECT {_COLUMNS} FROM tasks WHERE status = ? ORDER BY created_at DESC",
                (status,),
            )
        else:
            cursor = await self._conn.execute(
                f"SELECT {_COLUMNS} FROM tasks ORDER BY created_at DESC"
            )
        rows = await cursor.fetchall()
        return [self._row_to_task(row) for row in rows]

    async def update_task(self, task_id: str, changes: dict[str, Any]) -> bool:
        """部分更新任务文档

        Args:
            task_id: 任务 ID
            changes: Task 字段名 -> 新值，仅允许 _UPDATABLE_FIELDS 内的字段

        Returns:
            True 如果命中了一条记录

        Raises:
            ValueError: 包含不可更新的字段
            PersistenceError: 数据库写入失败
        """
        unknown = set(changes) - _UPDATABLE_FIELDS
        if unknown:
            raise ValueError(f"Fields not updatable: {sorted(unknown)}")
        if not changes:
            return await self.get_task(task_id) is not None

        assignments = []
        params: list[Any] = []
        for field, value in changes.items():
            assignments.append(f"{field} = ?")
            params.append(_to_column(field, value))
        params.append(task_id)

        try:
            cursor = await self._conn.execute(
                f"UPDATE tasks SET {', '.join(assignments)} WHERE task_id = ?",
                params,
            )
            await self._conn.commit()
        except aiosqlite.Error as e:
            await self._conn.rollback()
            raise PersistenceError(task_id, e) from e
        return cursor.rowcount > 0

    async def delete_task(self, task_id: str) -> bool:
        """删除任务，返回是否存在"""
        try:
            cursor = await self._conn.execute(
                "DELETE FROM tasks WHERE task_id = ?",
                (task_id,),
            )
            await self._conn.commit()
        except aiosqlite.Error as e:
            await self._conn.rollback()
            raise PersistenceError(task_id, e) from e
        return cursor.rowcount > 0

    @staticmethod
    def _row_to_task(row) -> Task:
        """将数据库行转换为 Task 模型"""
        links_data = json.loads(row[6] or "[]")
        return Task(
            task_id=row[0],
            url=row[1],
            status=TaskStatus(row[2]),
            created_at=datetime.fromisoformat(row[3]),
            updated_at=datetime.fromisoformat(row[4]),
            completed_at=datetime.fromisoformat(row[5]) if row[5] else None,
            links=[TaskLink.model_validate(item) for item in links_data],
            preview=MoviePreview.model_validate_json(row[7]) if row[7] else None,
            metadata=MovieMetadata.model_validate_json(row[8]) if row[8] else None,
            error=row[9],
        )


def _dump_links(links: list[TaskLink]) -> str:
    return json.dumps([link.to_wire() for link in links], ensure_ascii=False)


def _dump_optional(model) -> str | None:
    if model is None:
        return None
    return json.dumps(model.to_wire(), ensure_ascii=False)


def _to_column(field: str, value: Any) -> Any:
    """将 Task 字段值转换为列值"""
    if value is None:
        return None
    if field == "links":
        return _dump_links(
            [v if isinstance(v, TaskLink) else TaskLink.model_validate(v) for v in value]
        )
    if field in ("preview", "metadata"):
        return _dump_optional(value)
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, TaskStatus):
        return value.value
    return value
