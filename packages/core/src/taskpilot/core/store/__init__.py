"""TaskPilot Core Store -- 任务存储后端

提供工厂函数按配置创建 Store 实例组。后端在启动时选定一次，
调用方只依赖 TaskStore 协议。
"""

from pathlib import Path

import aiosqlite
import structlog

from ..config import StoreBackend, get_db_path, get_store_backend
from .memory_store import InMemoryTaskStore
from .protocols import TaskStore
from .seed import demo_tasks, seed_demo_tasks
from .sqlite_init import init_db, verify_wal_mode
from .task_store import SqliteTaskStore

log = structlog.get_logger()


class StoreGroup:
    """Store 实例组"""

    def __init__(
        self,
        task_store: TaskStore,
        backend: StoreBackend,
        conn: aiosqlite.Connection | None = None,
    ) -> None:
        self.task_store = task_store
        self.backend = backend
        self.conn = conn

    async def close(self) -> None:
        await self.task_store.close()


async def open_sqlite_connection(db_path: str) -> aiosqlite.Connection:
    """打开并初始化 SQLite 连接（确保数据库目录存在）"""
    Path(db_path).parent.mkdir(parents=True, exist_ok=True)
    conn = await aiosqlite.connect(db_path)
    conn.row_factory = aiosqlite.Row
    await init_db(conn)
    return conn


async def create_store_group(
    backend: StoreBackend | None = None,
    db_path: str | None = None,
    seed: bool = True,
) -> StoreGroup:
    """创建 Store 实例组

    Args:
        backend: "memory" 或 "sqlite"，缺省读取 TASKPILOT_STORE_BACKEND
        db_path: SQLite 数据库文件路径，缺省读取 TASKPILOT_DB_PATH
        seed: 内存后端是否预置演示任务

    Returns:
        StoreGroup 实例
    """
    backend = backend or get_store_backend()

    if backend == "sqlite":
        db_path = db_path or get_db_path()
        conn = await open_sqlite_connection(db_path)
        await log.ainfo("task_store_opened", backend=backend, db_path=db_path)
        return StoreGroup(SqliteTaskStore(conn), backend=backend, conn=conn)

    await log.ainfo("task_store_opened", backend=backend, seeded=seed)
    return StoreGroup(InMemoryTaskStore(seed=seed), backend=backend)


__all__ = [
    "StoreGroup",
    "TaskStore",
    "create_store_group",
    "open_sqlite_connection",
    "SqliteTaskStore",
    "InMemoryTaskStore",
    "init_db",
    "verify_wal_mode",
    "demo_tasks",
    "seed_demo_tasks",
]
