"""依赖注入模块 -- 通过 FastAPI Depends 注入 lifespan 中创建的组件

所有组件挂在 app.state 上，在 lifespan 中初始化/清理。
"""

from fastapi import Request
from mflix.core.store import StoreGroup
from mflix.solvers import PageScanner, ResolutionPipeline, SolverClient


def get_store_group(request: Request) -> StoreGroup:
    """从 app.state 获取 StoreGroup 实例"""
    return request.app.state.store_group


def get_solver_client(request: Request) -> SolverClient:
    return request.app.state.solver_client


def get_pipeline(request: Request) -> ResolutionPipeline:
    return request.app.state.pipeline


def get_page_scanner(request: Request) -> PageScanner:
    return request.app.state.page_scanner


def get_running_batches(request: Request) -> set:
    """进行中的批次 asyncio.Task 集合（保持强引用）"""
    return request.app.state.running_batches
