"""健康检查路由

GET /health: Liveness 检查，永远返回 200。
GET /ready: Readiness 检查，探测当前配置的任务存储。
"""

import structlog
from fastapi import APIRouter, Request
from starlette.responses import JSONResponse

log = structlog.get_logger()

router = APIRouter()


@router.get("/health")
async def health():
    """Liveness 检查 -- 永远返回 200"""
    return {"status": "ok"}


@router.get("/ready")
async def ready(request: Request):
    """Readiness 检查 -- 验证任务存储可用性

    检查项：
    1. task_store: 网关 health_check() 结果
    2. store_mode: 当前存储模式（sqlite/remote）
    """
    checks = {}
    all_ok = True

    config = getattr(request.app.state, "config", None)
    checks["store_mode"] = config.store_mode if config is not None else "unknown"

    gateway = getattr(request.app.state, "gateway", None)
    if gateway is None:
        checks["task_store"] = "unavailable"
        all_ok = False
    else:
        try:
            healthy = await gateway.health_check()
        except Exception as e:
            log.warning("health_check_error", error=str(e))
            healthy = False
        checks["task_store"] = "ok" if healthy else "unreachable"
        all_ok = healthy

    status_code = 200 if all_ok else 503
    status_text = "ready" if all_ok else "not_ready"

    return JSONResponse(
        status_code=status_code,
        content={
            "status": status_text,
            "checks": checks,
        },
    )
