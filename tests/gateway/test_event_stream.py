"""EventStreamEmitter 测试

测试内容：
1. 按推送顺序产出，end() 后迭代结束
2. 消费者断开后 emit() 为静默 no-op
3. NDJSON / SSE 编码
"""

import json

from mflix.core.models import ResolutionEvent
from mflix.gateway.services.event_stream import EventStreamEmitter, ndjson_lines, sse_messages


async def _collect(iterator) -> list:
    return [item async for item in iterator]


class TestEventStreamEmitter:
    """事件通道"""

    async def test_yields_in_order_until_end(self):
        emitter = EventStreamEmitter()
        emitter.emit(ResolutionEvent.log(1, "a"))
        emitter.emit(ResolutionEvent.log(2, "b"))
        emitter.emit(ResolutionEvent.finished(1))
        emitter.end()

        events = await _collect(emitter.events())

        assert [(e.id, e.kind) for e in events] == [(1, "log"), (2, "log"), (1, "finished")]
        assert emitter.emitted == 3

    async def test_emit_after_end_is_dropped(self):
        emitter = EventStreamEmitter()
        emitter.end()
        emitter.emit(ResolutionEvent.log(1, "late"))
        emitter.end()

        assert await _collect(emitter.events()) == []

    async def test_close_makes_emit_noop(self):
        emitter = EventStreamEmitter()
        emitter.emit(ResolutionEvent.log(1, "pending"))
        emitter.close()

        emitter.emit(ResolutionEvent.log(1, "after close"))
        emitter.end()

        assert emitter.closed is True
        assert emitter.emitted == 1

    async def test_consumer_exit_closes_channel(self):
        """消费者提前退出迭代即视为断开"""
        emitter = EventStreamEmitter()
        emitter.emit(ResolutionEvent.log(1, "first"))
        emitter.emit(ResolutionEvent.log(1, "second"))

        iterator = emitter.events()
        first = await anext(iterator)
        await iterator.aclose()

        assert first.message == "first"
        assert emitter.closed is True
        emitter.emit(ResolutionEvent.log(1, "ignored"))
        assert emitter.emitted == 2


class TestEncoders:
    """线路编码"""

    async def test_ndjson_lines(self):
        emitter = EventStreamEmitter()
        emitter.emit(ResolutionEvent.done(0, "https://cdn.test/a.mkv", "🎉 COMPLETED via FSL"))
        emitter.emit(ResolutionEvent.finished(0))
        emitter.end()

        lines = await _collect(ndjson_lines(emitter))

        assert all(line.endswith("\n") and line.count("\n") == 1 for line in lines)
        assert json.loads(lines[0]) == {
            "id": 0,
            "message": "🎉 COMPLETED via FSL",
            "level": "success",
            "finalLink": "https://cdn.test/a.mkv",
            "status": "done",
        }
        assert json.loads(lines[1]) == {"id": 0, "status": "finished"}

    async def test_sse_messages(self):
        emitter = EventStreamEmitter()
        emitter.emit(ResolutionEvent.error(3, "❌ boom"))
        emitter.end()

        messages = await _collect(sse_messages(emitter))

        assert messages[0]["event"] == "error"
        assert json.loads(messages[0]["data"])["message"] == "❌ boom"
