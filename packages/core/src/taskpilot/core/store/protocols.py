"""Store Protocol 接口定义

定义 TaskStore 的抽象接口，使用 Python Protocol 实现结构化子类型（duck typing）。
UI 的 CRUD 路径和 agent 的工具路径共用同一个 TaskStore 实例。
"""

from typing import Protocol

from ..models.task import SubtaskSpec, Task, TaskCreate, TaskUpdate


class TaskStore(Protocol):
    """Task 存储接口"""

    async def list_tasks(self) -> list[Task]:
        """查询全部任务，按 created_at 倒序（同一时刻按 id 倒序）"""
        ...

    async def get_task(self, task_id: str) -> Task | None:
        """根据 id 查询任务"""
        ...

    async def create_task(self, data: TaskCreate) -> Task:
        """创建任务，返回持久化后的记录（含生成的 id 和时间戳）"""
        ...

    async def update_task(self, task_id: str, changes: TaskUpdate) -> Task:
        """部分更新：仅 changes 中显式设置的字段被写入，updated_at 总是刷新"""
        ...

    async def delete_task(self, task_id: str) -> list[str]:
        """删除任务及其直接子任务，返回被删除的 id 列表"""
        ...

    async def create_subtasks(
        self,
        parent_id: str,
        items: list[SubtaskSpec],
    ) -> list[Task]:
        """批量创建子任务（全部成功或全部失败）"""
        ...

    async def close(self) -> None:
        """释放底层资源"""
        ...
