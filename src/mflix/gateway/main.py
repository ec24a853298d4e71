"""FastAPI 应用主文件

app 创建 + lifespan 管理：DB 初始化/关闭、Solver 组件初始化、路由注册。
"""

import asyncio
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI
from mflix.core.config import get_db_path
from mflix.core.store import create_store_group
from mflix.solvers import (
    HtmlPageScanner,
    ResolutionPipeline,
    SolverClient,
    StageRegistry,
    load_solver_config,
)

from .middleware.logging_config import setup_logfire, setup_logging
from .middleware.logging_mw import LoggingMiddleware
from .middleware.trace_mw import TraceMiddleware
from .routes import health, resolve, tasks

log = structlog.get_logger()

# 关闭时等待进行中批次的最长时间（秒）
SHUTDOWN_DRAIN_TIMEOUT_S = 30


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """应用生命周期管理：启动时初始化 DB 与 Solver 组件，关闭时等待批次并清理连接"""
    store_group = await create_store_group(get_db_path())
    app.state.store_group = store_group

    solver_config = load_solver_config()
    solver_client = SolverClient(solver_config)
    registry = StageRegistry()
    app.state.solver_client = solver_client
    app.state.stage_registry = registry
    app.state.pipeline = ResolutionPipeline(solver_client, registry)
    app.state.page_scanner = HtmlPageScanner(solver_client)
    app.state.running_batches = set()

    log.info(
        "solver_initialized",
        rules=len(registry.list_all()),
        timer_api=solver_config.timer_api_url,
        resolver_api=solver_config.resolver_api_url,
    )

    yield

    # 关闭：先让进行中的批次完成持久化
    running = set(app.state.running_batches)
    if running:
        log.info("draining_batches", count=len(running))
        _, pending = await asyncio.wait(running, timeout=SHUTDOWN_DRAIN_TIMEOUT_S)
        for batch in pending:
            batch.cancel()
        if pending:
            log.warning("batches_cancelled_on_shutdown", count=len(pending))

    await solver_client.aclose()
    if hasattr(app.state, "store_group") and app.state.store_group:
        await app.state.store_group.conn.close()


def create_app() -> FastAPI:
    """创建 FastAPI 应用实例"""
    app = FastAPI(
        title="Mflix Resolver",
        version="0.1.0",
        description="多跳下载链接解析 API",
        lifespan=lifespan,
    )

    # 注册中间件（顺序：先 Trace 后 Logging）
    app.add_middleware(TraceMiddleware)
    app.add_middleware(LoggingMiddleware)

    setup_logging()
    setup_logfire()

    app.include_router(resolve.router, tags=["resolve"])
    app.include_router(tasks.router, tags=["tasks"])
    app.include_router(health.router, tags=["health"])

    return app


# 默认 app 实例（uvicorn 入口）
app = create_app()
