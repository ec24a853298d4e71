"""任务路由

POST /api/tasks: 扫描页面并创建任务（同 URL 已有任务时合并新链接）
GET /api/tasks: 任务列表，支持 status 筛选，按 created_at 倒序
GET /api/tasks/{task_id}: 任务详情
DELETE /api/tasks/{task_id}: 删除任务
"""

from fastapi import APIRouter, Depends, Query
from mflix.solvers import ScanError
from pydantic import BaseModel, Field
from starlette.responses import JSONResponse

from ..deps import get_page_scanner, get_store_group
from ..services.task_service import TaskService

router = APIRouter()


class CreateTaskRequest(BaseModel):
    """任务创建请求体"""

    url: str = Field(min_length=1, description="来源页面 URL")


def _task_not_found(task_id: str) -> JSONResponse:
    return JSONResponse(
        status_code=404,
        content={
            "error": {
                "code": "TASK_NOT_FOUND",
                "message": f"Task with id {task_id} does not exist",
            }
        },
    )


@router.post("/api/tasks")
async def create_task(
    body: CreateTaskRequest,
    store_group=Depends(get_store_group),
    scanner=Depends(get_page_scanner),
):
    """创建或合并任务

    - 新任务返回 201
    - 合并进已有任务返回 200
    """
    service = TaskService(store_group, scanner)
    try:
        task, created = await service.create_or_merge(body.url.strip())
    except ScanError as e:
        return JSONResponse(
            status_code=422,
            content={"error": {"code": "SCAN_FAILED", "message": str(e)}},
        )

    return JSONResponse(
        status_code=201 if created else 200,
        content={
            "taskId": task.task_id,
            "created": created,
            "task": task.to_wire(),
        },
    )


@router.get("/api/tasks")
async def list_tasks(
    status: str | None = Query(default=None, description="按状态筛选"),
    store_group=Depends(get_store_group),
):
    service = TaskService(store_group)
    tasks = await service.list_tasks(status)
    return [t.to_wire() for t in tasks]


@router.get("/api/tasks/{task_id}")
async def get_task_detail(
    task_id: str,
    store_group=Depends(get_store_group),
):
    service = TaskService(store_group)
    task = await service.get_task(task_id)
    if task is None:
        return _task_not_found(task_id)
    return task.to_wire()


@router.delete("/api/tasks/{task_id}")
async def delete_task(
    task_id: str,
    store_group=Depends(get_store_group),
):
    service = TaskService(store_group)
    if not await service.delete_task(task_id):
        return _task_not_found(task_id)
    return {"taskId": task_id, "deleted": True}
