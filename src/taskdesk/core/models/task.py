"""Task 数据模型

Task 为远端 tasks 表中的一行；NewTaskFields / TaskPatch 为写入时的字段集合。
id、created_at 由存储端分配，写入模型中不出现。
"""

from datetime import datetime
from typing import Annotated, Any

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, model_validator

from .enums import TaskPriority, TaskStatus


def _normalize_title(value: Any) -> Any:
    """去除标题首尾空白，空标题视为缺失"""
    if isinstance(value, str):
        value = value.strip()
        if not value:
            raise ValueError("title 不能为空")
    return value


TitleStr = Annotated[str, BeforeValidator(_normalize_title)]


class Task(BaseModel):
    """Task 数据模型 -- 远端 tasks 表的一行"""

    id: str = Field(description="唯一标识，由存储端分配")
    title: str = Field(min_length=1, description="任务标题")
    description: str | None = Field(default=None, description="任务描述")
    status: TaskStatus = Field(description="当前状态")
    priority: TaskPriority = Field(description="优先级")
    due_date: datetime | None = Field(default=None, description="截止时间")
    created_at: datetime = Field(description="创建时间（创建后不变）")
    updated_at: datetime = Field(description="更新时间（每次修改刷新）")

    def matches_text(self, needle: str) -> bool:
        """大小写不敏感地匹配标题或描述"""
        needle = needle.lower()
        if needle in self.title.lower():
            return True
        return self.description is not None and needle in self.description.lower()


class NewTaskFields(BaseModel):
    """创建任务时提交的字段"""

    model_config = ConfigDict(extra="forbid")

    title: TitleStr = Field(description="任务标题")
    description: str | None = Field(default=None, description="任务描述")
    status: TaskStatus = Field(description="初始状态")
    priority: TaskPriority = Field(description="优先级")
    due_date: datetime | None = Field(default=None, description="截止时间")

    def to_row(self) -> dict[str, Any]:
        """转换为存储端行数据（JSON 兼容）"""
        return self.model_dump(mode="json")


class TaskPatch(BaseModel):
    """更新任务时提交的部分字段，仅显式设置的字段会被写入"""

    model_config = ConfigDict(extra="forbid")

    title: TitleStr | None = None
    description: str | None = None
    status: TaskStatus | None = None
    priority: TaskPriority | None = None
    due_date: datetime | None = None

    @model_validator(mode="after")
    def _reject_null_required(self) -> "TaskPatch":
        # description / due_date 允许显式置空，其余字段不可为 NULL
        for name in ("title", "status", "priority"):
            if name in self.model_fields_set and getattr(self, name) is None:
                raise ValueError(f"{name} 不能为空")
        return self

    def to_row(self) -> dict[str, Any]:
        """仅导出显式设置的字段"""
        return self.model_dump(mode="json", exclude_unset=True)
