"""端到端流程测试 -- 真实 lifespan + SQLite 存储

测试内容：
1. 启动时创建网关并首次加载
2. 写操作经由通知广播器发布 toast
3. 重启后从存储恢复任务
"""

from pathlib import Path

import pytest
from httpx import ASGITransport, AsyncClient
from taskdesk.web.main import create_app


@pytest.fixture
def app_env(monkeypatch, tmp_path: Path) -> Path:
    monkeypatch.setenv("TASKDESK_DATA_DIR", str(tmp_path))
    monkeypatch.delenv("TASKDESK_DB_PATH", raising=False)
    monkeypatch.delenv("TASKDESK_SESSION_PATH", raising=False)
    monkeypatch.delenv("TASKDESK_STORE_MODE", raising=False)
    return tmp_path


async def _run(app, steps):
    async with app.router.lifespan_context(app):
        async with AsyncClient(
            transport=ASGITransport(app=app),
            base_url="http://test",
        ) as client:
            return await steps(client)


class TestLifespanFlow:
    async def test_startup_initializes_state(self, app_env):
        app = create_app()

        async def steps(client):
            assert app.state.config.store_mode == "sqlite"
            assert app.state.controller.tasks == ()
            return (await client.get("/ready")).status_code

        assert await _run(app, steps) == 200
        assert (app_env / "sqlite" / "taskdesk.db").exists()
        assert app.state.controller.closed is True

    async def test_mutations_publish_notifications(self, app_env):
        app = create_app()

        async def steps(client):
            queue = await app.state.notification_hub.subscribe()
            resp = await client.post(
                "/api/tasks",
                json={"title": "Plan sprint", "status": "pending", "priority": "medium"},
            )
            task_id = resp.json()["id"]
            await client.patch(f"/api/tasks/{task_id}", json={"status": "in-progress"})
            await client.delete(f"/api/tasks/{task_id}")
            await client.delete(f"/api/tasks/{task_id}")

            messages = []
            while not queue.empty():
                messages.append(queue.get_nowait())
            return [(n.level.value, n.message) for n in messages]

        assert await _run(app, steps) == [
            ("success", "Task created successfully"),
            ("success", "Task updated successfully"),
            ("success", "Task deleted successfully"),
            ("error", "Failed to delete task"),
        ]

    async def test_tasks_survive_restart(self, app_env):
        async def create(client):
            for title in ("first", "second"):
                await client.post(
                    "/api/tasks",
                    json={"title": title, "status": "pending", "priority": "low"},
                )

        await _run(create_app(), create)

        async def read(client):
            return [t["title"] for t in (await client.get("/api/tasks")).json()["tasks"]]

        assert await _run(create_app(), read) == ["first", "second"]

    async def test_session_persists_across_restart(self, app_env):
        async def sign_in(client):
            await client.post(
                "/api/session/sign-in",
                json={"email": "ada@example.com", "password": "secret"},
            )

        await _run(create_app(), sign_in)

        async def current(client):
            return (await client.get("/api/session")).json()["user"]

        user = await _run(create_app(), current)
        assert user["email"] == "ada@example.com"
        assert (app_env / "session.json").exists()
