"""Gateway 测试配置 -- 手动装配 app.state（ASGITransport 不触发 lifespan）"""

import json
import os
from collections.abc import AsyncGenerator
from datetime import UTC, datetime
from pathlib import Path

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from mflix.core.models import LinkStatus, Task, TaskLink
from mflix.solvers import HtmlPageScanner, ResolutionPipeline, StageRegistry


@pytest_asyncio.fixture
async def app(tmp_path: Path, store_group, solver_client):
    """创建测试用 FastAPI app 实例"""
    os.environ["MFLIX_DATA_DIR"] = str(tmp_path)
    os.environ["LOGFIRE_SEND_TO_LOGFIRE"] = "false"

    from mflix.gateway.main import create_app

    application = create_app()

    registry = StageRegistry()
    application.state.store_group = store_group
    application.state.solver_client = solver_client
    application.state.stage_registry = registry
    application.state.pipeline = ResolutionPipeline(solver_client, registry)
    application.state.page_scanner = HtmlPageScanner(solver_client)
    application.state.running_batches = set()

    yield application

    for key in ["MFLIX_DATA_DIR", "LOGFIRE_SEND_TO_LOGFIRE"]:
        os.environ.pop(key, None)


@pytest_asyncio.fixture
async def client(app) -> AsyncGenerator[AsyncClient, None]:
    """提供 httpx AsyncClient 用于测试"""
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac


@pytest.fixture
def seeded_task() -> Task:
    """三条 pending 链接的任务"""
    now = datetime(2026, 1, 1, tzinfo=UTC)
    return Task(
        task_id="01JTASKGATEWAY00000000000A",
        url="https://movies.test/some-movie",
        links=[
            TaskLink(name="480p", link="https://hubcloud.foo/drive/a", status=LinkStatus.PENDING),
            TaskLink(name="720p", link="https://hubcloud.foo/drive/b", status=LinkStatus.PENDING),
            TaskLink(name="1080p", link="https://hubcloud.foo/drive/c", status=LinkStatus.PENDING),
        ],
        created_at=now,
        updated_at=now,
    )


def parse_ndjson(text: str) -> list[dict]:
    return [json.loads(line) for line in text.splitlines() if line.strip()]


@pytest.fixture
def ndjson():
    return parse_ndjson
