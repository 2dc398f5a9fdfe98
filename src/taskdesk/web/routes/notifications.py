"""通知流路由

GET /api/notifications/stream: SSE 实时推送用户通知（toast），带心跳保活。
"""

import asyncio
from collections.abc import AsyncIterator

import structlog
from fastapi import APIRouter, Depends
from sse_starlette.sse import EventSourceResponse
from taskdesk.core.config import NOTIFY_HEARTBEAT_INTERVAL
from taskdesk.core.models import Notification

from ..deps import get_notification_hub
from ..services.notification_hub import NotificationHub

log = structlog.get_logger()

router = APIRouter()


def _notification_to_sse(notification: Notification) -> dict:
    return {
        "event": notification.level.value,
        "data": notification.model_dump_json(),
    }


async def notification_events(
    hub: NotificationHub,
    heartbeat_interval: float = NOTIFY_HEARTBEAT_INTERVAL,
) -> AsyncIterator[dict]:
    """订阅广播器并逐条产出 SSE 事件

    队列满时广播器会移除该订阅；此处推送完积压通知后重新订阅，连接保持可用。
    """
    queue = await hub.subscribe()
    try:
        while True:
            try:
                notification = await asyncio.wait_for(queue.get(), timeout=heartbeat_interval)
                yield _notification_to_sse(notification)
            except TimeoutError:
                # 心跳保活
                yield {"comment": "heartbeat"}

            if not hub.is_subscribed(queue):
                while not queue.empty():
                    yield _notification_to_sse(queue.get_nowait())
                queue = await hub.subscribe()
                log.warning("notification_stream_resubscribed")
    finally:
        await hub.unsubscribe(queue)


@router.get("/api/notifications/stream")
async def stream_notifications(hub: NotificationHub = Depends(get_notification_hub)):
    """SSE 通知流端点

    1. 注册到 NotificationHub
    2. 实时推送新通知
    3. 心跳保活
    """
    return EventSourceResponse(notification_events(hub))
