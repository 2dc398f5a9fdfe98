"""RestTaskGateway -- 远端任务存储（PostgREST 接口）调用封装

四个逻辑调用：按 created_at 升序全量查询、插入一行、按 id 更新、按 id 删除。
写操作使用 Prefer: return=representation，空结果表示 id 不存在。
"""

import time
from datetime import UTC, datetime
from typing import Any

import httpx
import structlog
from pydantic import ValidationError

from ..config import REST_PATH_PREFIX
from ..exceptions import StoreUnreachableError, TaskNotFoundError, TaskStoreError
from ..models.task import NewTaskFields, Task, TaskPatch

log = structlog.get_logger()

# 健康检查超时（硬编码，应快速响应）
HEALTH_CHECK_TIMEOUT_S = 5


def _extract_error_message(resp: httpx.Response) -> str:
    """从 PostgREST 错误响应中提取可读信息"""
    try:
        body = resp.json()
    except ValueError:
        return resp.text or resp.reason_phrase
    if isinstance(body, dict):
        return str(body.get("message") or body.get("error") or body)
    return str(body)


class RestTaskGateway:
    """远端任务存储客户端

    封装 httpx.AsyncClient，所有传输错误与错误状态码统一转换为 TaskStoreError。
    """

    def __init__(
        self,
        base_url: str,
        api_key: str = "",
        table: str = "tasks",
        timeout_s: int = 10,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """初始化远端存储客户端

        Args:
            base_url: 远端服务基础 URL
            api_key: 服务 API key（同时作为 apikey 与 Bearer token 发送）
            table: 任务表名
            timeout_s: 请求超时（秒）
            transport: 自定义 httpx transport（测试时注入 MockTransport）
        """
        self._base_url = base_url.rstrip("/")
        self._table_path = f"{REST_PATH_PREFIX}/{table}"
        self._client = httpx.AsyncClient(
            base_url=self._base_url,
            headers={
                "apikey": api_key,
                "Authorization": f"Bearer {api_key}",
                "Accept": "application/json",
            },
            timeout=timeout_s,
            transport=transport,
        )

    async def list_tasks(self) -> list[Task]:
        """查询全部任务，按 created_at 升序"""
        data = await self._request(
            "GET",
            "list_tasks",
            params={"select": "*", "order": "created_at.asc"},
        )
        return self._parse_rows("list_tasks", data)

    async def create_task(self, fields: NewTaskFields) -> Task:
        """插入一行，返回存储端生成的完整记录"""
        data = await self._request(
            "POST",
            "create_task",
            json=fields.to_row(),
            representation=True,
        )
        rows = self._parse_rows("create_task", data)
        if not rows:
            raise TaskStoreError("create_task 失败: 存储端未返回新记录")
        log.info("task_created", task_id=rows[0].id)
        return rows[0]

    async def update_task(self, task_id: str, patch: TaskPatch) -> Task:
        """按 id 部分更新，并刷新 updated_at"""
        values = patch.to_row()
        body = {**values, "updated_at": datetime.now(UTC).isoformat()}
        data = await self._request(
            "PATCH",
            "update_task",
            params={"id": f"eq.{task_id}"},
            json=body,
            representation=True,
        )
        rows = self._parse_rows("update_task", data)
        if not rows:
            log.warning("task_not_found", operation="update_task", task_id=task_id)
            raise TaskNotFoundError(task_id)
        log.info("task_updated", task_id=task_id, fields=sorted(values))
        return rows[0]

    async def delete_task(self, task_id: str) -> None:
        """按 id 删除，未命中任何行时抛出 TaskNotFoundError"""
        data = await self._request(
            "DELETE",
            "delete_task",
            params={"id": f"eq.{task_id}"},
            representation=True,
        )
        if not self._parse_rows("delete_task", data):
            log.warning("task_not_found", operation="delete_task", task_id=task_id)
            raise TaskNotFoundError(task_id)
        log.info("task_deleted", task_id=task_id)

    async def health_check(self) -> bool:
        """检查远端存储可达性

        发送 GET {table}?select=id&limit=0 请求。

        Returns:
            True 如果存储可用，False 如果不可达或异常

        注意: 此方法不抛出异常，所有异常内部捕获并返回 False。
        """
        try:
            resp = await self._client.get(
                self._table_path,
                params={"select": "id", "limit": "0"},
                timeout=HEALTH_CHECK_TIMEOUT_S,
            )
            return resp.status_code == 200
        except Exception as e:
            log.debug("health_check_failed", store="remote", error=str(e))
            return False

    async def close(self) -> None:
        """关闭底层 HTTP 连接池"""
        await self._client.aclose()

    async def _request(
        self,
        method: str,
        operation: str,
        *,
        params: dict[str, str] | None = None,
        json: dict[str, Any] | None = None,
        representation: bool = False,
    ) -> Any:
        """发送请求并解码 JSON 响应体

        Raises:
            StoreUnreachableError: 连接失败或超时
            TaskStoreError: 存储端返回错误状态码、响应无法读取或无法解析
        """
        headers = {"Prefer": "return=representation"} if representation else None
        start_time = time.monotonic()
        try:
            resp = await self._client.request(
                method,
                self._table_path,
                params=params,
                json=json,
                headers=headers,
            )
        except httpx.TransportError as e:
            log.error(
                "task_store_request_failed",
                store="remote",
                operation=operation,
                error=str(e),
                error_type=type(e).__name__,
            )
            raise StoreUnreachableError(store_url=self._base_url, original_error=e) from e
        except httpx.RequestError as e:
            # 已收到响应但无法读取（解压失败、重定向过多等）
            log.error(
                "task_store_request_failed",
                store="remote",
                operation=operation,
                error=str(e),
                error_type=type(e).__name__,
            )
            raise TaskStoreError(f"{operation} 失败: {type(e).__name__}: {e}") from e

        duration_ms = int((time.monotonic() - start_time) * 1000)
        if resp.is_error:
            message = _extract_error_message(resp)
            log.error(
                "task_store_request_failed",
                store="remote",
                operation=operation,
                status_code=resp.status_code,
                error=message,
                duration_ms=duration_ms,
            )
            raise TaskStoreError(
                f"{operation} 失败: {message}",
                status_code=resp.status_code,
            )

        log.debug(
            "task_store_request_completed",
            operation=operation,
            status_code=resp.status_code,
            duration_ms=duration_ms,
        )
        if not resp.content:
            return None
        try:
            return resp.json()
        except ValueError as e:
            raise TaskStoreError(f"{operation} 失败: 响应不是合法 JSON") from e

    @staticmethod
    def _parse_rows(operation: str, data: Any) -> list[Task]:
        """将响应体解析为 Task 列表，空响应视为空列表"""
        if data is None:
            return []
        if not isinstance(data, list):
            raise TaskStoreError(f"{operation} 失败: 期望数组响应，实际为 {type(data).__name__}")
        try:
            return [Task.model_validate(row) for row in data]
        except ValidationError as e:
            log.error(
                "task_store_malformed_row",
                operation=operation,
                error_count=e.error_count(),
            )
            raise TaskStoreError(f"{operation} 失败: 存储端返回的行无法解析") from e
