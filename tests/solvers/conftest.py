"""Solver 包测试 fixtures"""

import pytest
from mflix.solvers import ResolutionPipeline, StageRegistry


@pytest.fixture
def pipeline(solver_client) -> ResolutionPipeline:
    return ResolutionPipeline(solver_client, StageRegistry())


@pytest.fixture
def events() -> list:
    """收集 pipeline 推送的事件"""
    return []
