"""Task Domain Model -- 持久化任务文档

Task 由外部文档存储持有；解析核心只读写 links / status / completed_at。
status 是全部链接状态的纯函数（见 mflix.core.projection）。
"""

from datetime import datetime

from pydantic import ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from .base import WireModel
from .enums import RESOLVED_LINK_STATES, LinkStatus, TaskStatus, normalize_link_status
from .link import AlternativeButton, LogEntry


class TaskLink(WireModel):
    """任务内的一条链接：LinkItem 与 LinkResult 字段的并集

    保留未知字段，未参与本批次合并的条目原样写回。
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="allow",
    )

    name: str = Field(default="")
    link: str = Field(description="原始 URL，合并时的匹配键")
    final_link: str | None = Field(default=None)
    status: LinkStatus = Field(default=LinkStatus.PENDING)
    error: str | None = Field(default=None)
    logs: list[LogEntry] = Field(default_factory=list)
    best_button_name: str | None = Field(default=None)
    all_available_buttons: list[AlternativeButton] = Field(default_factory=list)

    @field_validator("status", mode="before")
    @classmethod
    def _normalize_status(cls, value: object) -> LinkStatus:
        return normalize_link_status(value)

    @property
    def resolved(self) -> bool:
        return self.status in RESOLVED_LINK_STATES


class MoviePreview(WireModel):
    """页面预览信息"""

    title: str = Field(default="Unknown Movie")
    poster_url: str | None = Field(default=None)


class MovieMetadata(WireModel):
    """页面元数据"""

    quality: str = Field(default="Unknown Quality")
    languages: str = Field(default="Not Specified")
    audio_label: str = Field(default="Not Found")


class Task(WireModel):
    """Task 数据模型"""

    task_id: str = Field(alias="id", description="唯一标识，ULID 格式")
    url: str = Field(description="来源页面 URL")
    status: TaskStatus = Field(default=TaskStatus.PROCESSING)
    links: list[TaskLink] = Field(default_factory=list)
    created_at: datetime = Field(description="创建时间")
    updated_at: datetime = Field(description="更新时间")
    completed_at: datetime | None = Field(default=None, description="进入终态的时间")
    preview: MoviePreview | None = Field(default=None)
    metadata: MovieMetadata | None = Field(default=None)
    error: str | None = Field(default=None)
