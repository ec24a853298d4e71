"""ResolutionEvent -- 流式进度事件（仅存在于传输线路上）

每条链接的事件序列：若干 log -> done 或 error（二选一，恰好一次）-> finished。
"""

from pydantic import Field

from .base import WireModel
from .enums import LogLevel, StreamStatus


class ResolutionEvent(WireModel):
    """单个流事件，序列化为一行 JSON"""

    id: int = Field(description="链接标识，原样回显")
    message: str | None = Field(default=None)
    level: LogLevel | None = Field(default=None)
    final_link: str | None = Field(default=None)
    status: StreamStatus | None = Field(default=None)

    @classmethod
    def log(cls, link_id: int, message: str, level: LogLevel = LogLevel.INFO) -> "ResolutionEvent":
        return cls(id=link_id, message=message, level=level)

    @classmethod
    def done(cls, link_id: int, final_link: str, message: str) -> "ResolutionEvent":
        return cls(
            id=link_id,
            message=message,
            level=LogLevel.SUCCESS,
            final_link=final_link,
            status=StreamStatus.DONE,
        )

    @classmethod
    def error(cls, link_id: int, message: str) -> "ResolutionEvent":
        return cls(
            id=link_id,
            message=message,
            level=LogLevel.ERROR,
            status=StreamStatus.ERROR,
        )

    @classmethod
    def finished(cls, link_id: int) -> "ResolutionEvent":
        return cls(id=link_id, status=StreamStatus.FINISHED)

    @property
    def kind(self) -> str:
        """事件类别：log / done / error / finished"""
        if self.status is None:
            return "log"
        if self.status == StreamStatus.PROCESSING:
            return "log"
        return self.status.value
