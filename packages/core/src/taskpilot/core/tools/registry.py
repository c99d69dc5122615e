"""Tool Registry -- 工具注册与分发

每个工具由 ToolSpec（名称、描述、参数）和一个异步 handler 组成。
invoke 是 agent 的唯一入口：任何失败都转换为给 agent 的字符串，从不向上抛出。
注册表自己拦下的失败（未知工具、缺参数、读取快照失败）同样发出 error 通知。
"""

from collections.abc import Awaitable, Callable
from typing import Any, Literal

import structlog
from pydantic import BaseModel, Field

from ..exceptions import BackendError
from ..models.enums import NotificationLevel
from ..models.notification import Notification
from ..models.task import Task
from ..notify import LogNotifier, Notifier

log = structlog.get_logger()

# handler(arguments, tasks) -> 给 agent 的结果字符串
ToolHandler = Callable[[dict[str, Any], list[Task]], Awaitable[str]]
TaskSnapshot = Callable[[], Awaitable[list[Task]]]


class ToolParameter(BaseModel):
    """工具参数声明"""

    name: str = Field(description="参数名（agent 调用时使用的键）")
    type: Literal["string", "array"] = Field(default="string", description="JSON 类型")
    description: str = Field(default="", description="给 agent 的参数说明")
    required: bool = Field(default=False, description="是否必填")
    items: dict[str, Any] | None = Field(default=None, description="array 元素 schema")

    def json_schema(self) -> dict[str, Any]:
        schema: dict[str, Any] = {"type": self.type, "description": self.description}
        if self.items is not None:
            schema["items"] = self.items
        return schema


class ToolSpec(BaseModel):
    """工具声明"""

    name: str
    description: str
    parameters: list[ToolParameter] = Field(default_factory=list)

    def to_function_schema(self) -> dict[str, Any]:
        """生成 OpenAI 风格的 function schema（供聊天运行时声明工具）"""
        return {
            "type": "function",
            "function": {
                "name": self.name,
                "description": self.description,
                "parameters": {
                    "type": "object",
                    "properties": {p.name: p.json_schema() for p in self.parameters},
                    "required": [p.name for p in self.parameters if p.required],
                },
            },
        }


def _is_missing(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


class ToolRegistry:
    """工具注册表

    invoke 调用之间不保留任何状态：未传入任务快照时，每次都从 snapshot 重新读取。
    """

    def __init__(self, snapshot: TaskSnapshot, notifier: Notifier | None = None) -> None:
        self._snapshot = snapshot
        self._notifier = notifier or LogNotifier()
        self._tools: dict[str, tuple[ToolSpec, ToolHandler]] = {}

    def register(self, spec: ToolSpec, handler: ToolHandler) -> None:
        if spec.name in self._tools:
            raise ValueError(f"Tool already registered: {spec.name}")
        self._tools[spec.name] = (spec, handler)

    def specs(self) -> list[ToolSpec]:
        return [spec for spec, _ in self._tools.values()]

    def get(self, name: str) -> ToolSpec | None:
        entry = self._tools.get(name)
        return entry[0] if entry else None

    def function_schemas(self) -> list[dict[str, Any]]:
        return [spec.to_function_schema() for spec in self.specs()]

    async def _fail(self, name: str, toast: str, result: str) -> str:
        await self._notifier.notify(
            Notification(level=NotificationLevel.ERROR, message=toast, source=name)
        )
        return result

    async def invoke(
        self,
        name: str,
        arguments: dict[str, Any] | None = None,
        tasks: list[Task] | None = None,
    ) -> str:
        """调用工具，返回给 agent 的结果字符串

        Args:
            name: 工具名
            arguments: agent 传入的参数
            tasks: 调用方持有的任务快照；None 时重新读取
        """
        entry = self._tools.get(name)
        if entry is None:
            available = ", ".join(self._tools)
            await log.awarning("tool_unknown", tool=name)
            return await self._fail(
                name,
                f"Unknown tool: {name}",
                f"Unknown tool: {name}. Available tools: {available}.",
            )

        spec, handler = entry
        args = dict(arguments or {})
        missing = [p.name for p in spec.parameters if p.required and _is_missing(args.get(p.name))]
        if missing:
            return await self._fail(
                name,
                f"Missing {', '.join(missing)} for {name}",
                f"Missing required argument for {name}: {', '.join(missing)}.",
            )

        await log.ainfo("tool_invoked", tool=name, arguments=sorted(args))
        try:
            if tasks is None:
                tasks = await self._snapshot()
            return await handler(args, tasks)
        except BackendError as exc:
            await log.aerror("tool_backend_failed", tool=name, operation=exc.operation)
            return await self._fail(
                name,
                f"Failed to run {name}",
                f"Failed to run {name}: the task store is unavailable. Please try again.",
            )
        except Exception:
            await log.aexception("tool_handler_crashed", tool=name)
            return await self._fail(
                name, f"Failed to run {name}", f"Failed to run {name}. Please try again."
            )
