"""全局 pytest 配置 -- 临时 SQLite 数据库 + 伪造外部网站的 httpx fixture"""

from collections.abc import AsyncGenerator, Callable
from pathlib import Path

import aiosqlite
import httpx
import pytest
import pytest_asyncio
from mflix.core.store import StoreGroup, create_store_group
from mflix.solvers import SolverClient, SolverConfig

TIMER_API = "http://timer.test/solve?url="
RESOLVER_API = "http://resolver.test/solve?url="


class FakeWeb:
    """按 URL 路由的 httpx.MockTransport 处理器

    - page(): 普通页面，按完整 URL 精确匹配
    - delegate(): 外部解析服务，按 (host, url 查询参数) 匹配
    未注册的地址返回 404。
    """

    def __init__(self) -> None:
        self._pages: dict[str, Callable[[httpx.Request], httpx.Response]] = {}
        self._delegates: dict[tuple[str, str], Callable[[httpx.Request], httpx.Response]] = {}
        self.requests: list[httpx.Request] = []

    def page(self, url: str, html: str, status: int = 200) -> None:
        self._pages[url] = lambda request: httpx.Response(status, text=html)

    def page_error(self, url: str, exc_type: type[httpx.HTTPError]) -> None:
        def _raise(request: httpx.Request) -> httpx.Response:
            raise exc_type("boom", request=request)

        self._pages[url] = _raise

    def delegate(self, host: str, target: str, payload: dict | str, status: int = 200) -> None:
        if isinstance(payload, str):
            self._delegates[(host, target)] = lambda request: httpx.Response(status, text=payload)
        else:
            self._delegates[(host, target)] = lambda request: httpx.Response(status, json=payload)

    def delegate_error(self, host: str, target: str, exc_type: type[httpx.HTTPError]) -> None:
        def _raise(request: httpx.Request) -> httpx.Response:
            raise exc_type("boom", request=request)

        self._delegates[(host, target)] = _raise

    def calls_to(self, host: str) -> list[httpx.Request]:
        return [r for r in self.requests if r.url.host == host]

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        target = request.url.params.get("url")
        handler = None
        if target is not None:
            handler = self._delegates.get((request.url.host, target))
        if handler is None:
            handler = self._pages.get(str(request.url))
        if handler is None:
            return httpx.Response(404, text="not found")
        return handler(request)


@pytest.fixture
def fake_web() -> FakeWeb:
    return FakeWeb()


@pytest.fixture
def solver_config() -> SolverConfig:
    return SolverConfig(timer_api_url=TIMER_API, resolver_api_url=RESOLVER_API)


@pytest_asyncio.fixture
async def solver_client(
    fake_web: FakeWeb, solver_config: SolverConfig
) -> AsyncGenerator[SolverClient, None]:
    """注入 MockTransport 的 SolverClient"""
    http = httpx.AsyncClient(transport=httpx.MockTransport(fake_web))
    client = SolverClient(solver_config, http_client=http)
    yield client
    await http.aclose()


@pytest_asyncio.fixture
async def tmp_db_path(tmp_path: Path) -> Path:
    """提供临时 SQLite 数据库路径"""
    return tmp_path / "test.db"


@pytest_asyncio.fixture
async def db_conn(tmp_db_path: Path) -> AsyncGenerator[aiosqlite.Connection, None]:
    """提供已初始化的临时 SQLite 数据库连接"""
    from mflix.core.store.sqlite_init import init_db

    conn = await aiosqlite.connect(str(tmp_db_path))
    await init_db(conn)
    yield conn
    await conn.close()


@pytest_asyncio.fixture
async def store_group(tmp_db_path: Path) -> AsyncGenerator[StoreGroup, None]:
    """创建测试用 StoreGroup"""
    sg = await create_store_group(str(tmp_db_path))
    yield sg
    await sg.conn.close()
