"""EventStreamEmitter -- 单个批次的进度事件通道

生产者（各链接单元）同步调用 emit()，消费者（HTTP 响应体）异步迭代。
队列无上限：事件不能丢失，批次规模由调用方限定。
消费者断开后 emit() 变为静默 no-op，批次照常运行至结束。
"""

import asyncio
from collections.abc import AsyncIterator

import structlog
from mflix.core.models import ResolutionEvent

log = structlog.get_logger()

# 流结束标记
_END = object()


class EventStreamEmitter:
    """基于 asyncio.Queue 的单消费者事件通道"""

    def __init__(self) -> None:
        self._queue: asyncio.Queue = asyncio.Queue()
        self._closed = False
        self._ended = False
        self.emitted = 0

    @property
    def closed(self) -> bool:
        return self._closed

    def emit(self, event: ResolutionEvent) -> None:
        """推送一个事件；通道关闭或已结束后静默丢弃"""
        if self._closed or self._ended:
            return
        self._queue.put_nowait(event)
        self.emitted += 1

    def end(self) -> None:
        """生产者声明流结束（批次 join 完成且已尝试持久化之后调用）"""
        if self._ended:
            return
        self._ended = True
        if not self._closed:
            self._queue.put_nowait(_END)

    def close(self) -> None:
        """消费者断开：丢弃积压事件，此后 emit() 为 no-op"""
        if self._closed:
            return
        self._closed = True
        dropped = self._queue.qsize()
        while not self._queue.empty():
            self._queue.get_nowait()
        if not self._ended:
            log.info("event_stream_consumer_gone", dropped=dropped)

    async def events(self) -> AsyncIterator[ResolutionEvent]:
        """按推送顺序产出事件，直到 end()

        迭代器被提前关闭（客户端断开）时自动 close()。
        """
        try:
            while True:
                item = await self._queue.get()
                if item is _END:
                    return
                yield item
        finally:
            self.close()


async def ndjson_lines(emitter: EventStreamEmitter) -> AsyncIterator[str]:
    """NDJSON 编码：每个事件一行 JSON"""
    async for event in emitter.events():
        yield event.model_dump_json(by_alias=True, exclude_none=True) + "\n"


async def sse_messages(emitter: EventStreamEmitter) -> AsyncIterator[dict]:
    """SSE 编码：event 为事件类别，data 为同一 JSON"""
    async for event in emitter.events():
        yield {
            "event": event.kind,
            "data": event.model_dump_json(by_alias=True, exclude_none=True),
        }
