"""
公共 Schema 基类

对外（HTTP 响应、客户端持久化 JSON）统一使用 camelCase 字段名，
Python 侧保持 snake_case；两种写法入参都接受。
"""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """camelCase 序列化的 Pydantic 基类"""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )

    def to_json_dict(self) -> dict:
        """按对外格式导出（camelCase + JSON 兼容类型）"""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)
