"""ResolveService -- 批次并发编排

流程：
1. 每条链接一个独立协程，无并发上限，全部 gather
2. 单元内任何异常就地转换为 error 结果，不影响兄弟单元
3. 每个单元无论成败都在 finally 中推送 finished
4. join 之后把结果交给 Reconciler，最后结束事件流

批次运行在独立的 asyncio.Task 中：客户端断开只会关闭事件通道，不会取消解析与持久化。
"""

import asyncio
from collections.abc import Sequence

import structlog
from mflix.core.models import (
    LinkItem,
    LinkResult,
    LinkStatus,
    LogEntry,
    LogLevel,
    ResolutionEvent,
)
from mflix.solvers import ResolutionPipeline

from .event_stream import EventStreamEmitter
from .reconciler import Reconciler

log = structlog.get_logger()


class ResolveService:
    """批次编排服务"""

    def __init__(
        self,
        pipeline: ResolutionPipeline,
        reconciler: Reconciler | None = None,
        running_batches: set[asyncio.Task] | None = None,
    ) -> None:
        self._pipeline = pipeline
        self._reconciler = reconciler
        self._running = running_batches if running_batches is not None else set()

    def start_batch(
        self,
        items: Sequence[LinkItem],
        task_id: str | None,
        emitter: EventStreamEmitter,
    ) -> asyncio.Task:
        """在后台启动批次，返回对应的 asyncio.Task"""
        batch = asyncio.create_task(self.run_batch(items, task_id, emitter))
        self._running.add(batch)
        batch.add_done_callback(self._running.discard)
        return batch

    async def run_batch(
        self,
        items: Sequence[LinkItem],
        task_id: str | None,
        emitter: EventStreamEmitter,
    ) -> dict[int, LinkResult]:
        """运行整个批次

        Returns:
            link id -> LinkResult
        """
        log.info("batch_started", task_id=task_id, link_count=len(items))
        results: dict[int, LinkResult] = {}
        try:
            outcomes = await asyncio.gather(
                *(self._run_unit(item, index, emitter) for index, item in enumerate(items))
            )
            for result in outcomes:
                if result.id in results:
                    log.warning(
                        "duplicate_link_id",
                        task_id=task_id,
                        link_id=result.id,
                        kept=result.original_link,
                        dropped=results[result.id].original_link,
                    )
                results[result.id] = result

            done = sum(1 for r in results.values() if r.succeeded)
            log.info(
                "batch_completed",
                task_id=task_id,
                done=done,
                failed=len(results) - done,
            )

            if task_id and self._reconciler is not None:
                # 按原始 URL 合并，重复 id 的结果也全部交给 Reconciler
                await self._reconcile(task_id, outcomes)
        finally:
            emitter.end()
        return results

    async def _reconcile(self, task_id: str, outcomes: Sequence[LinkResult]) -> None:
        try:
            await self._reconciler.reconcile(task_id, outcomes)
        except Exception as e:
            log.error(
                "batch_reconcile_failed",
                task_id=task_id,
                error_type=type(e).__name__,
                error=str(e),
                exc_info=True,
            )

    async def _run_unit(
        self,
        item: LinkItem,
        index: int,
        emitter: EventStreamEmitter,
    ) -> LinkResult:
        link_id = item.id if item.id is not None else index
        try:
            return await self._pipeline.resolve(item, link_id, emitter.emit)
        except Exception as e:
            log.error(
                "link_unit_crashed",
                link_id=link_id,
                error_type=type(e).__name__,
                error=str(e),
                exc_info=True,
            )
            message = f"⚠️ Critical Error: {e}"
            emitter.emit(ResolutionEvent.error(link_id, message))
            return LinkResult(
                id=link_id,
                name=item.name,
                original_link=item.link,
                status=LinkStatus.ERROR,
                error=str(e) or type(e).__name__,
                logs=[LogEntry(message=message, level=LogLevel.ERROR)],
            )
        finally:
            emitter.emit(ResolutionEvent.finished(link_id))
