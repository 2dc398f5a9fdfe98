"""FilterCriteria -- 任务列表筛选条件

会话内临时状态，不持久化。status / priority 为空表示不过滤。
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .enums import TaskPriority, TaskStatus


class FilterCriteria(BaseModel):
    """筛选条件"""

    model_config = ConfigDict(extra="forbid", frozen=True)

    search_term: str = Field(default="", description="标题/描述子串，大小写不敏感")
    status_filter: TaskStatus | None = Field(default=None, description="状态精确匹配")
    priority_filter: TaskPriority | None = Field(default=None, description="优先级精确匹配")

    @field_validator("status_filter", "priority_filter", mode="before")
    @classmethod
    def _empty_as_none(cls, value: Any) -> Any:
        # 前端下拉框的 "全部" 选项提交空字符串
        if value == "":
            return None
        return value

    @field_validator("search_term", mode="before")
    @classmethod
    def _none_as_empty(cls, value: Any) -> Any:
        return "" if value is None else value

    def merge(self, **partial: Any) -> "FilterCriteria":
        """合并部分字段，返回新的筛选条件（校验后）"""
        return FilterCriteria.model_validate({**self.model_dump(), **partial})

    @property
    def is_identity(self) -> bool:
        """是否为不过滤任何任务的条件"""
        return (
            self.search_term == ""
            and self.status_filter is None
            and self.priority_filter is None
        )
