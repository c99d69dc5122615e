"""Agent 可读上下文单元测试"""

from datetime import UTC, date, datetime

from taskpilot.core.context import build_readable_context
from taskpilot.core.models import Task
from taskpilot.core.tools import build_system_prompt

_NOW = datetime.now(UTC)


def _task(task_id: str, **fields) -> Task:
    return Task(id=task_id, title=f"task {task_id}", created_at=_NOW, updated_at=_NOW, **fields)


class TestReadableContext:
    def test_stats(self):
        today = date(2025, 6, 15)
        tasks = [
            _task("a", priority="urgent", due_date=date(2025, 6, 1)),
            _task("b", status="in_progress", priority="high"),
            _task("c", status="done", due_date=date(2025, 6, 1)),
            _task("d", due_date=date(2025, 6, 15)),
            _task("e", parent_id="a"),
        ]
        stats = build_readable_context(tasks, today=today).stats

        assert stats.total == 5
        assert stats.todo == 3
        assert stats.in_progress == 1
        assert stats.done == 1
        assert stats.high_priority == 2
        # 已完成的和当天到期的都不算逾期
        assert stats.overdue == 1

    def test_digests(self):
        context = build_readable_context([_task("p"), _task("c", parent_id="p")])
        digests = {d.id: d for d in context.tasks}
        assert digests["p"].subtask_count == 1
        assert digests["p"].is_subtask is False
        assert digests["c"].is_subtask is True
        assert digests["c"].parent_id == "p"

    def test_empty(self):
        context = build_readable_context([])
        assert context.tasks == []
        assert context.stats.total == 0

    def test_system_prompt_embeds_snapshot(self):
        prompt = build_system_prompt(build_readable_context([_task("abc123")]))
        assert "findTask" in prompt
        assert "abc123" in prompt
        assert "task management assistant ONLY" in prompt
