"""TaskGateway SQLite 实现 -- 本地任务库

与远端 tasks 表契约一致：id 为 ULID，由存储端分配；按 created_at 升序返回，
相同 created_at 以插入顺序（rowid）排序；更新/删除不存在的 id 抛出 TaskNotFoundError。
"""

from datetime import UTC, datetime
from pathlib import Path

import aiosqlite
import structlog
from ulid import ULID

from ..exceptions import TaskNotFoundError, TaskStoreError
from ..models.task import NewTaskFields, Task, TaskPatch
from .sqlite_init import init_db

log = structlog.get_logger()

_COLUMNS = (
    "id",
    "title",
    "description",
    "status",
    "priority",
    "due_date",
    "created_at",
    "updated_at",
)
_SELECT = f"SELECT {', '.join(_COLUMNS)} FROM tasks"


def _now_iso() -> str:
    # 固定微秒精度，保证 ISO 字符串可按字典序比较
    return datetime.now(UTC).isoformat(timespec="microseconds")


class SqliteTaskGateway:
    """TaskGateway 的 SQLite 实现"""

    def __init__(self, conn: aiosqlite.Connection) -> None:
        self._conn = conn

    async def list_tasks(self) -> list[Task]:
        """查询全部任务，按 created_at 升序"""
        try:
            cursor = await self._conn.execute(
                f"{_SELECT} ORDER BY created_at ASC, rowid ASC"
            )
            rows = await cursor.fetchall()
            return [self._row_to_task(row) for row in rows]
        except (aiosqlite.Error, ValueError) as e:
            raise self._store_error("list_tasks", e) from e

    async def create_task(self, fields: NewTaskFields) -> Task:
        """插入任务，id / created_at / updated_at 由此处分配"""
        task_id = str(ULID())
        now = _now_iso()
        row = fields.to_row()
        try:
            await self._conn.execute(
                f"""
                INSERT INTO tasks ({', '.join(_COLUMNS)})
                VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    task_id,
                    row["title"],
                    row["description"],
                    row["status"],
                    row["priority"],
                    row["due_date"],
                    now,
                    now,
                ),
            )
            await self._conn.commit()
            task = await self._fetch(task_id)
        except (aiosqlite.Error, ValueError) as e:
            raise self._store_error("create_task", e) from e

        if task is None:
            raise TaskStoreError(f"create_task 失败: 插入后未找到 {task_id}")
        log.info("task_created", task_id=task_id)
        return task

    async def update_task(self, task_id: str, patch: TaskPatch) -> Task:
        """部分更新任务，updated_at 取 max(原值, 当前时间) 保证不回退"""
        values = patch.to_row()
        # 列名来自 TaskPatch 字段定义，不来自用户输入
        assignments = [f"{column} = ?" for column in values]
        assignments.append("updated_at = MAX(updated_at, ?)")
        try:
            cursor = await self._conn.execute(
                f"UPDATE tasks SET {', '.join(assignments)} WHERE id = ?",
                (*values.values(), _now_iso(), task_id),
            )
            if cursor.rowcount == 0:
                await self._conn.rollback()
                log.warning("task_not_found", operation="update_task", task_id=task_id)
                raise TaskNotFoundError(task_id)
            await self._conn.commit()
            task = await self._fetch(task_id)
        except (aiosqlite.Error, ValueError) as e:
            raise self._store_error("update_task", e) from e

        if task is None:
            raise TaskNotFoundError(task_id)
        log.info("task_updated", task_id=task_id, fields=sorted(values))
        return task

    async def delete_task(self, task_id: str) -> None:
        """删除任务，id 不存在时抛出 TaskNotFoundError"""
        try:
            cursor = await self._conn.execute(
                "DELETE FROM tasks WHERE id = ?",
                (task_id,),
            )
            if cursor.rowcount == 0:
                await self._conn.rollback()
                log.warning("task_not_found", operation="delete_task", task_id=task_id)
                raise TaskNotFoundError(task_id)
            await self._conn.commit()
        except aiosqlite.Error as e:
            raise self._store_error("delete_task", e) from e
        log.info("task_deleted", task_id=task_id)

    async def health_check(self) -> bool:
        """检查数据库连通性，不抛出异常"""
        try:
            cursor = await self._conn.execute("SELECT 1")
            await cursor.fetchone()
            return True
        except Exception as e:
            log.debug("health_check_failed", store="sqlite", error=str(e))
            return False

    async def close(self) -> None:
        """关闭数据库连接"""
        await self._conn.close()

    async def _fetch(self, task_id: str) -> Task | None:
        cursor = await self._conn.execute(f"{_SELECT} WHERE id = ?", (task_id,))
        row = await cursor.fetchone()
        if row is None:
            return None
        return self._row_to_task(row)

    @staticmethod
    def _row_to_task(row) -> Task:
        """将数据库行转换为 Task 模型"""
        return Task.model_validate(dict(zip(_COLUMNS, tuple(row))))

    @staticmethod
    def _store_error(operation: str, e: Exception) -> TaskStoreError:
        log.error(
            "task_store_request_failed",
            store="sqlite",
            operation=operation,
            error=str(e),
            error_type=type(e).__name__,
        )
        return TaskStoreError(f"{operation} 失败: {e}")


async def create_sqlite_gateway(db_path: str | Path) -> SqliteTaskGateway:
    """创建 SQLite 网关（确保目录存在并初始化表结构）

    Args:
        db_path: SQLite 数据库文件路径

    Returns:
        SqliteTaskGateway 实例
    """
    db_dir = Path(db_path).parent
    db_dir.mkdir(parents=True, exist_ok=True)

    conn = await aiosqlite.connect(str(db_path))
    conn.row_factory = aiosqlite.Row
    await init_db(conn)

    return SqliteTaskGateway(conn)
