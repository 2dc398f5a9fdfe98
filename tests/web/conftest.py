"""web 层测试配置 -- 手动组装 app.state（绕过 lifespan）+ httpx AsyncClient"""

from collections.abc import AsyncGenerator
from pathlib import Path

import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from taskdesk.core.config import TaskdeskConfig
from taskdesk.core.session import SessionContext
from taskdesk.web.services.notification_hub import NotificationHub
from taskdesk.web.services.task_collection import TaskCollectionController


@pytest_asyncio.fixture
async def test_app(tmp_path: Path, scripted_gateway):
    """创建测试用 FastAPI app，网关为可注入失败的临时 SQLite"""
    from taskdesk.web.main import create_app

    app = create_app()

    hub = NotificationHub()
    app.state.config = TaskdeskConfig()
    app.state.gateway = scripted_gateway
    app.state.notification_hub = hub
    app.state.controller = TaskCollectionController(scripted_gateway, notifier=hub)
    app.state.session = SessionContext(tmp_path / "session.json")

    yield app

    app.state.controller.close()


@pytest_asyncio.fixture
async def client(test_app) -> AsyncGenerator[AsyncClient, None]:
    async with AsyncClient(
        transport=ASGITransport(app=test_app),
        base_url="http://test",
    ) as ac:
        yield ac
