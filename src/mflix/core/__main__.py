"""CLI 入口模块 -- python -m mflix.core <command>

支持的命令：
  recompute-status  按链接状态重新推导全部任务的 status / completedAt
"""

import asyncio
import sys

from .config import get_db_path


def main() -> None:
    """CLI 主入口"""
    if len(sys.argv) < 2:
        print("用法: python -m mflix.core <command>")
        print("命令:")
        print("  recompute-status  按链接状态重新推导任务状态")
        sys.exit(1)

    command = sys.argv[1]

    if command == "recompute-status":
        asyncio.run(recompute_status())
    else:
        print(f"未知命令: {command}")
        print("可用命令: recompute-status")
        sys.exit(1)


async def recompute_status() -> int:
    """重新推导全部任务状态，返回发生变化的任务数"""
    from .projection import project_task
    from .store import create_store_group

    db_path = get_db_path()
    print(f"数据库路径: {db_path}")

    store_group = await create_store_group(db_path)
    changed = 0
    try:
        tasks = await store_group.task_store.list_tasks()
        for task in tasks:
            projected = project_task(task, task.links)
            if projected.status == task.status and (
                (projected.completed_at is None) == (task.completed_at is None)
            ):
                continue
            await store_group.task_store.update_task(
                task.task_id,
                {
                    "status": projected.status,
                    "completed_at": projected.completed_at,
                    "updated_at": projected.updated_at,
                },
            )
            changed += 1
        print(f"处理 {len(tasks)} 个任务，更新 {changed} 个")
    finally:
        await store_group.conn.close()
    return changed


if __name__ == "__main__":
    main()
