"""Link Domain Model -- 输入单元与单条链接解析结果"""

from pydantic import AliasChoices, Field

from .base import WireModel
from .enums import LinkStatus, LogLevel


class LinkItem(WireModel):
    """单条待解析链接 -- 每次请求临时构造

    id 由调用方提供，0 是合法且独立的标识；缺省时由批次下标补齐。
    """

    id: int | None = Field(default=None, description="调用方提供的链接标识")
    name: str = Field(default="", description="链接展示名称")
    link: str | None = Field(default=None, description="原始（未解析）链接")


class LogEntry(WireModel):
    """单条进度日志（兼容历史 msg/type 键名）"""

    message: str = Field(validation_alias=AliasChoices("message", "msg"))
    level: LogLevel = Field(
        default=LogLevel.INFO,
        validation_alias=AliasChoices("level", "type"),
    )


class AlternativeButton(WireModel):
    """直链解析服务返回的备选下载按钮"""

    button_name: str = Field(
        default="",
        validation_alias=AliasChoices("button_name", "buttonName"),
        serialization_alias="button_name",
    )
    download_link: str = Field(
        validation_alias=AliasChoices("download_link", "downloadLink"),
        serialization_alias="download_link",
    )


class LinkResult(WireModel):
    """单条链接的解析结果 -- 经 Reconciler 合并后才持久化

    持久化时按 original_link（解析前 URL）匹配，而非批次下标。
    """

    id: int = Field(description="回显的链接标识")
    name: str = Field(default="")
    original_link: str | None = Field(default=None, description="解析前的原始 URL")
    final_link: str | None = Field(default=None, description="最终直链")
    status: LinkStatus = Field(description="done 或 error")
    error: str | None = Field(default=None)
    logs: list[LogEntry] = Field(default_factory=list)
    best_button_name: str | None = Field(default=None)
    all_available_buttons: list[AlternativeButton] = Field(default_factory=list)

    @property
    def succeeded(self) -> bool:
        return self.status == LinkStatus.DONE
