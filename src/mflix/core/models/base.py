"""模型基类 -- 对外 JSON 统一使用 camelCase 键名"""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class WireModel(BaseModel):
    """camelCase 序列化、同时接受 snake_case / camelCase 输入"""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_wire(self) -> dict:
        """导出为对外 JSON 结构（camelCase，省略空字段）"""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)
