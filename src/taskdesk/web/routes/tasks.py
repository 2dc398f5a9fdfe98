"""任务路由 -- 控制器公共接口的 HTTP 映射

GET /api/tasks: 筛选后的任务列表 + loading + 筛选条件。
GET /api/tasks/stats: 完整集合统计。
GET /api/tasks/{task_id}: 当前快照中的编辑目标。
POST /api/tasks/reload: 全量重载。
POST /api/tasks, PATCH /api/tasks/{task_id}, DELETE /api/tasks/{task_id}: 写操作。
"""

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from starlette.responses import JSONResponse, Response
from taskdesk.core.exceptions import TaskNotFoundError, TaskStoreError
from taskdesk.core.models import FilterCriteria, NewTaskFields, Task, TaskPatch
from taskdesk.core.projection import TaskStats

from ..deps import get_controller
from ..services.task_collection import TaskCollectionController

router = APIRouter()


class TaskListResponse(BaseModel):
    """任务列表响应"""

    tasks: list[Task]
    total: int
    loading: bool
    filter: FilterCriteria


class ReloadResponse(BaseModel):
    """重载结果"""

    applied: bool
    count: int


def error_response(status_code: int, code: str, message: str) -> JSONResponse:
    """统一错误响应体"""
    return JSONResponse(
        status_code=status_code,
        content={"error": {"code": code, "message": message}},
    )


def store_error_response(e: TaskStoreError) -> JSONResponse:
    if isinstance(e, TaskNotFoundError):
        return error_response(404, "TASK_NOT_FOUND", str(e))
    return error_response(502, "TASK_STORE_ERROR", str(e))


@router.get("/api/tasks", response_model=TaskListResponse)
async def list_tasks(controller: TaskCollectionController = Depends(get_controller)):
    """查询筛选后的任务列表，按 created_at 升序"""
    return TaskListResponse(
        tasks=list(controller.visible_tasks),
        total=len(controller.tasks),
        loading=controller.loading,
        filter=controller.filter,
    )


@router.get("/api/tasks/stats", response_model=TaskStats)
async def task_stats(controller: TaskCollectionController = Depends(get_controller)):
    """完整任务集合的统计摘要"""
    return controller.stats()


@router.post("/api/tasks/reload", response_model=ReloadResponse)
async def reload_tasks(controller: TaskCollectionController = Depends(get_controller)):
    """全量重载；失败通过通知流告知"""
    applied = await controller.reload()
    return ReloadResponse(applied=applied, count=len(controller.tasks))


@router.get("/api/tasks/{task_id}", response_model=Task)
async def get_task(
    task_id: str,
    controller: TaskCollectionController = Depends(get_controller),
):
    """在当前快照中查找任务"""
    task = controller.find(task_id)
    if task is None:
        return error_response(
            404, "TASK_NOT_FOUND", f"Task with id {task_id} does not exist"
        )
    return task


@router.post("/api/tasks", status_code=201, response_model=Task)
async def create_task(
    fields: NewTaskFields,
    controller: TaskCollectionController = Depends(get_controller),
):
    """创建任务"""
    try:
        return await controller.create(fields)
    except TaskStoreError as e:
        return store_error_response(e)


@router.patch("/api/tasks/{task_id}", response_model=Task)
async def update_task(
    task_id: str,
    patch: TaskPatch,
    controller: TaskCollectionController = Depends(get_controller),
):
    """部分更新任务"""
    try:
        return await controller.update(task_id, patch)
    except TaskStoreError as e:
        return store_error_response(e)


@router.delete("/api/tasks/{task_id}", status_code=204)
async def delete_task(
    task_id: str,
    controller: TaskCollectionController = Depends(get_controller),
):
    """删除任务"""
    try:
        await controller.remove(task_id)
    except TaskStoreError as e:
        return store_error_response(e)
    return Response(status_code=204)
