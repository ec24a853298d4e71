"""健康检查路由

GET /health: Liveness 检查，永远返回 200。
GET /ready: Readiness 检查，包含 SQLite 连通性、data 目录、磁盘空间；
         profile=full 时额外探测两个外部解析服务。
"""

import shutil

import structlog
from fastapi import APIRouter, Query, Request
from mflix.core.config import get_data_dir
from starlette.responses import JSONResponse

from ..deps import get_solver_client

log = structlog.get_logger()

router = APIRouter()


@router.get("/health")
async def health():
    """Liveness 检查 -- 永远返回 200"""
    return {"status": "ok"}


@router.get("/ready")
async def ready(
    request: Request,
    profile: str | None = Query(
        default=None,
        description="core（默认）仅核心检查；full 额外探测外部解析服务",
    ),
):
    """Readiness 检查

    检查项：
    1. sqlite: 数据库连通性
    2. data_dir: data 目录可访问性
    3. disk_space_mb: 磁盘剩余空间
    4. timer_api / resolver_api: 仅 profile=full 时真实探测，否则 skipped
    """
    effective_profile = profile or "core"

    checks = {}
    all_ok = True

    try:
        store_group = request.app.state.store_group
        cursor = await store_group.conn.execute("SELECT 1")
        await cursor.fetchone()
        checks["sqlite"] = "ok"
    except Exception as e:
        checks["sqlite"] = f"error: {str(e)}"
        all_ok = False

    data_dir = get_data_dir()
    if data_dir.exists() and data_dir.is_dir():
        checks["data_dir"] = "ok"
    else:
        checks["data_dir"] = "error: directory does not exist"
        all_ok = False

    try:
        disk_usage = shutil.disk_usage(data_dir if data_dir.exists() else "/")
        checks["disk_space_mb"] = disk_usage.free // (1024 * 1024)
    except OSError:
        checks["disk_space_mb"] = 0
        all_ok = False

    if effective_profile == "full":
        client = get_solver_client(request)
        delegates = {
            "timer_api": client.config.timer_api_url,
            "resolver_api": client.config.resolver_api_url,
        }
        for name, api_url in delegates.items():
            if await client.health_check(api_url):
                checks[name] = "ok"
            else:
                log.warning("delegate_unreachable", delegate=name)
                checks[name] = "unreachable"
                all_ok = False
    else:
        checks["timer_api"] = "skipped"
        checks["resolver_api"] = "skipped"

    status_code = 200 if all_ok else 503
    status_text = "ready" if all_ok else "not_ready"

    return JSONResponse(
        status_code=status_code,
        content={
            "status": status_text,
            "profile": effective_profile,
            "checks": checks,
        },
    )
