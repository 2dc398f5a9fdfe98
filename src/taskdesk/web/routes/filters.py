"""筛选条件路由

GET /api/filter: 当前筛选条件。
PATCH /api/filter: 部分更新筛选条件（同步，无 I/O）。
"""

from fastapi import APIRouter, Depends
from pydantic import BaseModel, ValidationError
from taskdesk.core.models import FilterCriteria

from ..deps import get_controller
from ..services.task_collection import TaskCollectionController
from .tasks import error_response

router = APIRouter()


class FilterUpdate(BaseModel):
    """筛选条件更新请求，未提交的字段保持不变"""

    search_term: str | None = None
    status_filter: str | None = None
    priority_filter: str | None = None


@router.get("/api/filter", response_model=FilterCriteria)
async def get_filter(controller: TaskCollectionController = Depends(get_controller)):
    return controller.filter


@router.patch("/api/filter", response_model=FilterCriteria)
async def update_filter(
    body: FilterUpdate,
    controller: TaskCollectionController = Depends(get_controller),
):
    """更新筛选条件；status/priority 传空字符串表示取消该项筛选"""
    try:
        return controller.set_filter(**body.model_dump(exclude_unset=True))
    except ValidationError as e:
        return error_response(
            422,
            "INVALID_FILTER",
            "; ".join(str(err["msg"]) for err in e.errors()),
        )
