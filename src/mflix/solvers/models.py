"""Solver 数据模型 -- SolveResult"""

from mflix.core.models import AlternativeButton
from pydantic import BaseModel, Field


class SolveResult(BaseModel):
    """单个 stage 的成功结果

    is_direct=True 表示已拿到最终直链，pipeline 立即终止；
    否则 link 是推进后的下一跳 URL。
    """

    link: str = Field(description="推进后的 URL 或最终直链")
    source: str = Field(default="", description="命中规则的来源标签")
    is_direct: bool = Field(default=False)
    button_name: str | None = Field(default=None, description="选中按钮的标签")
    buttons: list[AlternativeButton] = Field(
        default_factory=list,
        description="全部备选按钮（直链解析服务提供）",
    )
