from typing import Optional

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.dependencies import get_optional_identity, require_admin
from app.db.session import get_db
from app.schemas.roadmap import ModuleResponse, ModuleUpdate, TaskCreate, TaskResponse, TaskUpdate
from app.schemas.token import TokenPayload
from app.services.roadmap_service import RoadmapService

router = APIRouter()


@router.get("/modules/{module_id}", response_model=ModuleResponse)
async def get_module(
    module_id: int,
    db: AsyncSession = Depends(get_db),
    identity: Optional[TokenPayload] = Depends(get_optional_identity)
):
    user_id = identity.user_id if identity else None
    return await RoadmapService(db).get_module(module_id, user_id=user_id)


@router.put("/modules/{module_id}", response_model=ModuleResponse)
async def update_module(
    module_id: int,
    data: ModuleUpdate,
    db: AsyncSession = Depends(get_db),
    admin: TokenPayload = Depends(require_admin)
):
    return await RoadmapService(db).update_module(module_id, data)


@router.delete("/modules/{module_id}")
async def delete_module(
    module_id: int,
    db: AsyncSession = Depends(get_db),
    admin: TokenPayload = Depends(require_admin)
):
    await RoadmapService(db).delete_module(module_id)
    return {"message": "Module deleted successfully"}


@router.post("/modules/{module_id}/tasks", response_model=TaskResponse, status_code=status.HTTP_201_CREATED)
async def add_task(
    module_id: int,
    data: TaskCreate,
    db: AsyncSession = Depends(get_db),
    admin: TokenPayload = Depends(require_admin)
):
    return await RoadmapService(db).add_task(module_id, data)


@router.put("/tasks/{task_id}", response_model=TaskResponse)
async def update_task(
    task_id: int,
    data: TaskUpdate,
    db: AsyncSession = Depends(get_db),
    admin: TokenPayload = Depends(require_admin)
):
    return await RoadmapService(db).update_task(task_id, data)


@router.delete("/tasks/{task_id}")
async def delete_task(
    task_id: int,
    db: AsyncSession = Depends(get_db),
    admin: TokenPayload = Depends(require_admin)
):
    await RoadmapService(db).delete_task(task_id)
    return {"message": "Task deleted successfully"}
