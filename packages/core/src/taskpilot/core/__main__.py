"""CLI 入口模块 -- python -m taskpilot.core <command>

支持的命令：
  seed   向 SQLite 数据库写入演示任务
  board  按看板列打印当前任务
"""

import asyncio
import sys

from .config import get_db_path
from .models.enums import STATUS_LABELS

_USAGE = """用法: python -m taskpilot.core <command>
命令:
  seed   向 SQLite 数据库写入演示任务
  board  按看板列打印当前任务"""


def main() -> None:
    """CLI 主入口"""
    if len(sys.argv) < 2:
        print(_USAGE)
        sys.exit(1)

    command = sys.argv[1]

    if command == "seed":
        asyncio.run(seed())
    elif command == "board":
        asyncio.run(show_board())
    else:
        print(f"未知命令: {command}")
        print("可用命令: seed, board")
        sys.exit(1)


async def seed() -> None:
    """写入演示任务"""
    from .store import create_store_group, seed_demo_tasks

    db_path = get_db_path()
    print(f"数据库路径: {db_path}")

    store_group = await create_store_group("sqlite", db_path)
    try:
        created = await seed_demo_tasks(store_group.task_store)
        print(f"已写入 {len(created)} 条演示任务")
    finally:
        await store_group.close()


async def show_board() -> None:
    """打印看板"""
    from .projection import group_with_subtasks
    from .store import create_store_group

    store_group = await create_store_group("sqlite", get_db_path())
    try:
        board = group_with_subtasks(await store_group.task_store.list_tasks())
    finally:
        await store_group.close()

    for status, tasks in board.items():
        print(f"== {STATUS_LABELS[status]} ({len(tasks)}) ==")
        for task in tasks:
            due = f" due {task.due_date.isoformat()}" if task.due_date else ""
            print(f"  [{task.priority.value}] {task.title} ({task.id}){due}")
            for subtask in getattr(task, "subtasks", []):
                print(f"      - [{subtask.status.value}] {subtask.title}")


if __name__ == "__main__":
    main()
