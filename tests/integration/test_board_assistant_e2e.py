"""看板 + 助手端到端集成测试

UI 创建任务 -> agent 通过工具定位并完成 -> 看板反映变化 -> 通知推送给前端。
"""

from httpx import AsyncClient
from taskpilot.core.store import create_store_group
from taskpilot.provider import ModelCallResult, ToolCall


def _reply(content: str = "", tool_calls: list[ToolCall] | None = None) -> ModelCallResult:
    return ModelCallResult(
        content=content,
        tool_calls=tool_calls or [],
        model_alias="main",
        duration_ms=1,
    )


def _column(board: dict, status: str) -> list[dict]:
    return next(c["tasks"] for c in board["columns"] if c["status"] == status)


class TestBoardAssistantEndToEnd:
    async def test_ui_task_completed_by_tools(self, client: AsyncClient):
        """工具路由直接调用：findTask -> markTaskComplete"""
        resp = await client.post("/api/tasks", json={"title": "Ship release", "priority": "high"})
        task_id = resp.json()["id"]

        board = (await client.get("/api/tasks/board")).json()
        assert [t["id"] for t in _column(board, "todo")] == [task_id]

        found = await client.post("/api/tools/findTask", json={"arguments": {"query": "ship"}})
        assert task_id in found.json()["result"]

        done = await client.post(
            "/api/tools/markTaskComplete", json={"arguments": {"id": task_id}}
        )
        assert done.json()["result"] == 'Marked "Ship release" as complete.'

        board = (await client.get("/api/tasks/board")).json()
        assert _column(board, "todo") == []
        [card] = _column(board, "done")
        assert card["id"] == task_id
        assert card["priority"] == "high"

    async def test_chat_breakdown_then_ui_delete(
        self, client: AsyncClient, integration_app, model
    ):
        """聊天拆解任务，UI 级联删除父任务"""
        parent = (await client.post("/api/tasks", json={"title": "Plan offsite"})).json()
        queue = await integration_app.state.notification_hub.subscribe()

        model.complete.side_effect = [
            _reply(
                tool_calls=[
                    ToolCall(
                        id="c1",
                        name="breakdownTask",
                        arguments={
                            "id": "offsite",
                            "subtasks": [{"title": "Book venue"}, {"title": "Send invites"}],
                        },
                    )
                ]
            ),
            _reply("I split it into two subtasks."),
        ]
        resp = await client.post(
            "/api/chat",
            json={"messages": [{"role": "user", "content": "break down the offsite"}]},
        )
        assert resp.json()["content"] == "I split it into two subtasks."

        notification = queue.get_nowait()
        assert notification.source == "breakdownTask"
        assert notification.level == "success"

        board = (await client.get("/api/tasks/board")).json()
        [card] = _column(board, "todo")
        assert [s["title"] for s in card["subtasks"]] == ["Book venue", "Send invites"]

        deleted = (await client.delete(f"/api/tasks/{parent['id']}")).json()["deleted"]
        assert len(deleted) == 3
        assert (await client.get("/api/tasks")).json()["tasks"] == []

    async def test_agent_sees_ui_edits(self, client: AsyncClient, model):
        """UI 修改后，下一轮聊天的系统提示词包含最新状态"""
        task = (await client.post("/api/tasks", json={"title": "Write report"})).json()
        await client.patch(f"/api/tasks/{task['id']}", json={"status": "in_progress"})

        await client.post("/api/chat", json={"messages": [{"role": "user", "content": "status?"}]})

        system = model.complete.call_args.kwargs["messages"][0]["content"]
        assert '"in_progress":1' in system
        assert "Write report" in system


class TestSqlitePersistence:
    async def test_tasks_survive_reopen(self, client: AsyncClient, tmp_path):
        await client.post("/api/tasks", json={"title": "Persist me", "due_date": "2030-06-01"})
        await client.post("/api/tools/createTask", json={"arguments": {"title": "From agent"}})

        group = await create_store_group("sqlite", str(tmp_path / "integration.db"))
        try:
            titles = [t.title for t in await group.task_store.list_tasks()]
        finally:
            await group.close()
        assert titles == ["From agent", "Persist me"]
