"""Task Projection 单元测试"""

from datetime import UTC, datetime

from taskpilot.core.models import Task, TaskStatus, TaskWithSubtasks
from taskpilot.core.projection import group_by_status, group_with_subtasks

_NOW = datetime.now(UTC)


def _task(task_id: str, status: str = "todo", parent_id: str | None = None) -> Task:
    return Task(
        id=task_id,
        title=f"task {task_id}",
        status=status,
        parent_id=parent_id,
        created_at=_NOW,
        updated_at=_NOW,
    )


class TestGroupByStatus:
    def test_all_buckets_present_for_empty_input(self):
        board = group_by_status([])
        assert list(board) == [TaskStatus.TODO, TaskStatus.IN_PROGRESS, TaskStatus.DONE]
        assert all(bucket == [] for bucket in board.values())

    def test_preserves_relative_order(self):
        tasks = [_task("a"), _task("b", "done"), _task("c"), _task("d", "in_progress")]
        board = group_by_status(tasks)
        assert [t.id for t in board[TaskStatus.TODO]] == ["a", "c"]
        assert [t.id for t in board[TaskStatus.IN_PROGRESS]] == ["d"]
        assert [t.id for t in board[TaskStatus.DONE]] == ["b"]

    def test_subtasks_included(self):
        board = group_by_status([_task("p"), _task("c", parent_id="p")])
        assert len(board[TaskStatus.TODO]) == 2


class TestGroupWithSubtasks:
    def test_children_nested_under_parent(self):
        tasks = [
            _task("c2", parent_id="p"),
            _task("p", "in_progress"),
            _task("c1", "done", parent_id="p"),
            _task("solo"),
        ]
        board = group_with_subtasks(tasks)

        [parent] = board[TaskStatus.IN_PROGRESS]
        assert isinstance(parent, TaskWithSubtasks)
        assert [c.id for c in parent.subtasks] == ["c2", "c1"]

        # 子任务不单独出现在任何列
        assert [t.id for t in board[TaskStatus.TODO]] == ["solo"]
        assert board[TaskStatus.DONE] == []

    def test_parent_without_children_keeps_bare_shape(self):
        board = group_with_subtasks([_task("solo")])
        [task] = board[TaskStatus.TODO]
        assert type(task) is Task

    def test_orphan_subtask_hidden(self):
        board = group_with_subtasks([_task("c", parent_id="gone")])
        assert all(bucket == [] for bucket in board.values())
