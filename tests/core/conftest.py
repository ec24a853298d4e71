"""Core 包测试 fixtures"""

from datetime import UTC, datetime

import pytest
from mflix.core.models import LinkStatus, Task, TaskLink


@pytest.fixture
def now() -> datetime:
    return datetime(2026, 1, 1, 12, 0, tzinfo=UTC)


@pytest.fixture
def make_task(now):
    """构造带指定链接状态的 Task"""

    def _make(
        *statuses: LinkStatus,
        task_id: str = "01JTASK000000000000000000A",
        url: str = "https://movies.test/post/1",
    ) -> Task:
        links = [
            TaskLink(name=f"Link {i}", link=f"https://hblinks.test/archives/{i}", status=status)
            for i, status in enumerate(statuses)
        ]
        return Task(
            task_id=task_id,
            url=url,
            links=links,
            created_at=now,
            updated_at=now,
        )

    return _make
