"""集成测试共享 fixture"""

import os
from collections.abc import AsyncGenerator
from pathlib import Path

import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from mflix.solvers import HtmlPageScanner, ResolutionPipeline, StageRegistry


@pytest_asyncio.fixture
async def integration_app(tmp_path: Path, store_group, solver_client):
    """集成测试用 FastAPI app（外部网站由 fake_web 提供）"""
    os.environ["MFLIX_DATA_DIR"] = str(tmp_path)
    os.environ["LOGFIRE_SEND_TO_LOGFIRE"] = "false"

    from mflix.gateway.main import create_app

    app = create_app()

    registry = StageRegistry()
    app.state.store_group = store_group
    app.state.solver_client = solver_client
    app.state.stage_registry = registry
    app.state.pipeline = ResolutionPipeline(solver_client, registry)
    app.state.page_scanner = HtmlPageScanner(solver_client)
    app.state.running_batches = set()

    yield app

    os.environ.pop("MFLIX_DATA_DIR", None)
    os.environ.pop("LOGFIRE_SEND_TO_LOGFIRE", None)


@pytest_asyncio.fixture
async def client(integration_app) -> AsyncGenerator[AsyncClient, None]:
    async with AsyncClient(
        transport=ASGITransport(app=integration_app),
        base_url="http://test",
    ) as ac:
        yield ac
