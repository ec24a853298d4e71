"""批量解析路由

POST /api/stream_solve: 提交一批链接，以 NDJSON（默认）或 SSE 流式返回进度事件。
请求体非法时同步返回 400，不进入解析流程。
"""

import json

import structlog
from fastapi import APIRouter, Depends, Request
from mflix.core.config import SSE_PING_INTERVAL
from mflix.core.models import LinkItem
from mflix.core.models.base import WireModel
from pydantic import Field, ValidationError
from sse_starlette.sse import EventSourceResponse
from starlette.responses import JSONResponse, StreamingResponse

from ..deps import get_pipeline, get_running_batches, get_store_group
from ..services.event_stream import EventStreamEmitter, ndjson_lines, sse_messages
from ..services.reconciler import Reconciler
from ..services.resolve_service import ResolveService

log = structlog.get_logger()

router = APIRouter()

NDJSON_MEDIA_TYPE = "application/x-ndjson"


class ResolveRequest(WireModel):
    """批量解析请求体"""

    links: list[LinkItem] | None = Field(default=None, description="待解析链接")
    task_id: str | None = Field(default=None, description="结果写回的任务 ID")


def _error_response(code: str, message: str, status_code: int = 400) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"error": {"code": code, "message": message}},
    )


@router.post("/api/stream_solve")
async def stream_solve(
    request: Request,
    store_group=Depends(get_store_group),
    pipeline=Depends(get_pipeline),
    running_batches=Depends(get_running_batches),
):
    """提交批次并流式返回事件

    - Accept: text/event-stream -> SSE
    - 其他 -> NDJSON，每行一个事件
    """
    try:
        payload = await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        return _error_response("INVALID_JSON", "Request body is not valid JSON")

    try:
        body = ResolveRequest.model_validate(payload)
    except ValidationError as e:
        return _error_response(
            "INVALID_REQUEST",
            f"Invalid request body: {e.error_count()} validation error(s)",
        )

    if not body.links:
        return _error_response("NO_LINKS", "No links provided")

    if body.task_id:
        structlog.contextvars.bind_contextvars(trace_id=f"trace-{body.task_id}")

    emitter = EventStreamEmitter()
    service = ResolveService(
        pipeline,
        reconciler=Reconciler(store_group.task_store),
        running_batches=running_batches,
    )
    service.start_batch(body.links, body.task_id, emitter)

    if "text/event-stream" in request.headers.get("accept", ""):
        return EventSourceResponse(sse_messages(emitter), ping=SSE_PING_INTERVAL)

    return StreamingResponse(
        ndjson_lines(emitter),
        media_type=NDJSON_MEDIA_TYPE,
        headers={
            "Cache-Control": "no-cache",
            "X-Accel-Buffering": "no",
        },
    )
