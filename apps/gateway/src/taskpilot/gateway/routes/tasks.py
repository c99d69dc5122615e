"""看板任务路由

GET    /api/tasks                  扁平列表（created_at 倒序）
GET    /api/tasks/board            按状态分列的看板视图（子任务挂在父任务下）
GET    /api/tasks/{task_id}        任务详情
POST   /api/tasks                  创建任务
PATCH  /api/tasks/{task_id}        部分更新（JSON 中出现的字段才会写入，null 表示清空）
DELETE /api/tasks/{task_id}        级联删除
POST   /api/tasks/{task_id}/subtasks  批量创建子任务
POST   /api/tasks/seed             插入演示任务

/board 和 /seed 必须在 /{task_id} 之前注册。
"""

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field
from taskpilot.core.models import (
    STATUS_LABELS,
    STATUS_ORDER,
    SubtaskSpec,
    Task,
    TaskCreate,
    TaskStatus,
    TaskUpdate,
    TaskWithSubtasks,
)

from ..deps import get_task_service
from ..services.task_service import TaskService

router = APIRouter()


class TaskListResponse(BaseModel):
    tasks: list[Task]


class BoardColumn(BaseModel):
    """看板列"""

    status: TaskStatus
    label: str
    tasks: list[TaskWithSubtasks]


class BoardResponse(BaseModel):
    columns: list[BoardColumn]


class DeleteResponse(BaseModel):
    deleted: list[str] = Field(description="被删除的任务 ID，父任务在首位")


class SubtasksRequest(BaseModel):
    subtasks: list[SubtaskSpec] = Field(min_length=1)


def _as_card(task: Task) -> TaskWithSubtasks:
    if isinstance(task, TaskWithSubtasks):
        return task
    return TaskWithSubtasks(**task.model_dump())


@router.get("/api/tasks", response_model=TaskListResponse)
async def list_tasks(service: TaskService = Depends(get_task_service)):
    return TaskListResponse(tasks=await service.list_tasks())


@router.get("/api/tasks/board", response_model=BoardResponse)
async def get_board(service: TaskService = Depends(get_task_service)):
    """三列总是存在，顺序固定为 todo / in_progress / done"""
    board = await service.board()
    return BoardResponse(
        columns=[
            BoardColumn(
                status=status,
                label=STATUS_LABELS[status],
                tasks=[_as_card(task) for task in board[status]],
            )
            for status in STATUS_ORDER
        ]
    )


@router.post("/api/tasks/seed", response_model=TaskListResponse, status_code=201)
async def seed_tasks(service: TaskService = Depends(get_task_service)):
    return TaskListResponse(tasks=await service.seed())


@router.get("/api/tasks/{task_id}", response_model=Task)
async def get_task(task_id: str, service: TaskService = Depends(get_task_service)):
    return await service.get_task(task_id)


@router.post("/api/tasks", response_model=Task, status_code=201)
async def create_task(data: TaskCreate, service: TaskService = Depends(get_task_service)):
    return await service.create_task(data)


@router.patch("/api/tasks/{task_id}", response_model=Task)
async def update_task(
    task_id: str,
    changes: TaskUpdate,
    service: TaskService = Depends(get_task_service),
):
    return await service.update_task(task_id, changes)


@router.delete("/api/tasks/{task_id}", response_model=DeleteResponse)
async def delete_task(task_id: str, service: TaskService = Depends(get_task_service)):
    return DeleteResponse(deleted=await service.delete_task(task_id))


@router.post(
    "/api/tasks/{task_id}/subtasks",
    response_model=TaskListResponse,
    status_code=201,
)
async def create_subtasks(
    task_id: str,
    body: SubtasksRequest,
    service: TaskService = Depends(get_task_service),
):
    return TaskListResponse(tasks=await service.create_subtasks(task_id, body.subtasks))
