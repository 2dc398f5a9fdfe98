"""CLI 入口模块 -- python -m taskdesk.core <command>

支持的命令：
  init-db  创建本地 SQLite 任务库
  list     打印当前任务集合（按 created_at 升序）
"""

import asyncio
import sys

from .config import get_db_path, load_config
from .exceptions import TaskStoreError


def main() -> None:
    """CLI 主入口"""
    if len(sys.argv) < 2:
        print("用法: python -m taskdesk.core <command>")
        print("命令:")
        print("  init-db  创建本地 SQLite 任务库")
        print("  list     打印当前任务集合")
        sys.exit(1)

    command = sys.argv[1]

    if command == "init-db":
        asyncio.run(init_local_db())
    elif command == "list":
        sys.exit(asyncio.run(list_tasks()))
    else:
        print(f"未知命令: {command}")
        print("可用命令: init-db, list")
        sys.exit(1)


async def init_local_db() -> None:
    """创建本地任务库（已存在时保持不变）"""
    from .store import create_sqlite_gateway

    db_path = get_db_path()
    print(f"数据库路径: {db_path}")

    gateway = await create_sqlite_gateway(db_path)
    await gateway.close()
    print("初始化完成")


async def list_tasks() -> int:
    """按配置的存储模式查询并打印任务"""
    from .store import create_gateway

    gateway = await create_gateway(load_config(), get_db_path())
    try:
        tasks = await gateway.list_tasks()
    except TaskStoreError as e:
        print(f"查询失败: {e}", file=sys.stderr)
        return 1
    finally:
        await gateway.close()

    if not tasks:
        print("No tasks found.")
        return 0

    for task in tasks:
        due = f" due {task.due_date:%Y-%m-%d}" if task.due_date else ""
        print(f"[{task.status}] {task.id} {task.title} ({task.priority}){due}")
    return 0


if __name__ == "__main__":
    main()
