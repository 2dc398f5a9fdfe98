"""User -- 当前会话用户"""

from pydantic import BaseModel, Field


class User(BaseModel):
    """会话用户信息"""

    id: str = Field(description="用户 ID")
    email: str = Field(description="登录邮箱")
