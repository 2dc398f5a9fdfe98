"""LoggingMiddleware -- 请求级日志

每个请求绑定 request_id（沿用客户端传入的 X-Request-ID，否则生成 ULID）；
任务路由额外绑定 task_id，贯穿该请求内的控制器与网关日志。
"""

import time

import structlog
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response
from ulid import ULID

REQUEST_ID_HEADER = "X-Request-ID"

# 客户端传入的 request_id 最大长度，超出则重新生成
_MAX_REQUEST_ID_LENGTH = 64

# 不是任务 ID 的子路由
_TASK_SUBROUTES = {"stats", "reload"}


def _task_id_from_path(path: str) -> str | None:
    """从 /api/tasks/{task_id} 中提取 task_id"""
    parts = path.strip("/").split("/")
    if len(parts) == 3 and parts[:2] == ["api", "tasks"] and parts[2] not in _TASK_SUBROUTES:
        return parts[2]
    return None


def _request_id_for(request: Request) -> str:
    incoming = request.headers.get(REQUEST_ID_HEADER, "").strip()
    if incoming and len(incoming) <= _MAX_REQUEST_ID_LENGTH and incoming.isprintable():
        return incoming
    return str(ULID())


class LoggingMiddleware(BaseHTTPMiddleware):
    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        request_id = _request_id_for(request)
        context = {"request_id": request_id, "method": request.method, "path": request.url.path}
        if task_id := _task_id_from_path(request.url.path):
            context["task_id"] = task_id

        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(**context)
        log = structlog.get_logger()

        start = time.monotonic()
        try:
            response = await call_next(request)
        except Exception as e:
            await log.aerror("request_failed", error_type=type(e).__name__, error=str(e))
            raise

        await log.ainfo(
            "request_completed",
            status_code=response.status_code,
            duration_ms=int((time.monotonic() - start) * 1000),
        )
        response.headers[REQUEST_ID_HEADER] = request_id
        return response
