"""NotificationHub -- 内存中的用户通知广播器

每个订阅者持有一个 asyncio.Queue，支持 subscribe/unsubscribe/publish。
通知是临时的：没有订阅者时直接丢弃，不做持久化。
"""

import asyncio

import structlog

from taskdesk.core.models import Notification, NotificationLevel

log = structlog.get_logger()


class NotificationHub:
    """通知广播器 -- 基于 asyncio.Queue 的发布/订阅模式"""

    def __init__(self, queue_maxsize: int = 100) -> None:
        self._subscribers: set[asyncio.Queue] = set()
        self._queue_maxsize = queue_maxsize

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    async def subscribe(self) -> asyncio.Queue:
        """订阅通知流

        Returns:
            asyncio.Queue 实例，新通知会被推送到此队列
        """
        queue: asyncio.Queue = asyncio.Queue(maxsize=self._queue_maxsize)
        self._subscribers.add(queue)
        return queue

    async def unsubscribe(self, queue: asyncio.Queue) -> None:
        """取消订阅

        Args:
            queue: 之前订阅时返回的队列
        """
        self._subscribers.discard(queue)

    async def publish(self, notification: Notification) -> None:
        """向所有订阅者广播通知

        Args:
            notification: 要广播的通知
        """
        log.info(
            "notification_published",
            level=notification.level,
            message=notification.message,
            subscribers=len(self._subscribers),
        )
        dead_queues = []
        for queue in self._subscribers:
            try:
                queue.put_nowait(notification)
            except asyncio.QueueFull:
                dead_queues.append(queue)

        # 清理已满的队列；订阅方通过 is_subscribed() 感知并重新订阅
        for q in dead_queues:
            log.warning("notification_subscriber_dropped", reason="queue_full")
            self._subscribers.discard(q)

    async def success(self, message: str) -> None:
        await self.publish(Notification(level=NotificationLevel.SUCCESS, message=message))

    async def error(self, message: str) -> None:
        await self.publish(Notification(level=NotificationLevel.ERROR, message=message))

    def is_subscribed(self, queue: asyncio.Queue) -> bool:
        """队列是否仍在订阅列表中（队列满时会被 publish 移除）"""
        return queue in self._subscribers
