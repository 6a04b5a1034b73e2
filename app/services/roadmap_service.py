import logging
from typing import List, Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.core.errors import NotFound
from app.models.roadmap import Module, Roadmap, Task
from app.schemas.roadmap import (
    ModuleCreate,
    ModuleResponse,
    ModuleUpdate,
    RoadmapCreate,
    RoadmapDetail,
    RoadmapSummary,
    RoadmapUpdate,
    TaskCreate,
    TaskResponse,
    TaskUpdate,
)
from app.services.common import get_or_404
from app.services.progress_service import ProgressService

logger = logging.getLogger(__name__)


def _build_task(data: TaskCreate, position: int) -> Task:
    return Task(
        title=data.title,
        description=data.description,
        resource_url=data.resource_url or None,
        order_index=data.order_index if data.order_index is not None else position,
    )


def _build_module(data: ModuleCreate, position: int) -> Module:
    return Module(
        title=data.title,
        description=data.description,
        order_index=data.order_index if data.order_index is not None else position,
        tasks=[_build_task(t, i) for i, t in enumerate(data.tasks, start=1)],
    )


class RoadmapService:
    """Roadmap -> module -> task content. Writes are admin-only at the API layer."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.progress = ProgressService(db)

    # ===================================================================
    # Reads
    # ===================================================================

    async def list_roadmaps(self) -> List[RoadmapSummary]:
        module_count = (
            select(func.count(Module.id))
            .where(Module.roadmap_id == Roadmap.id)
            .correlate(Roadmap)
            .scalar_subquery()
        )
        task_count = (
            select(func.count(Task.id))
            .join(Module, Task.module_id == Module.id)
            .where(Module.roadmap_id == Roadmap.id)
            .correlate(Roadmap)
            .scalar_subquery()
        )
        result = await self.db.execute(
            select(Roadmap, module_count.label("module_count"), task_count.label("task_count"))
            .order_by(Roadmap.created_at.desc(), Roadmap.id.desc())
        )

        summaries = []
        for roadmap, modules, tasks in result.all():
            summary = RoadmapSummary.model_validate(roadmap)
            summary.module_count = modules or 0
            summary.task_count = tasks or 0
            summaries.append(summary)
        return summaries

    async def _load_roadmap(self, roadmap_id: int) -> Roadmap:
        result = await self.db.execute(
            select(Roadmap)
            .where(Roadmap.id == roadmap_id)
            .options(selectinload(Roadmap.modules).selectinload(Module.tasks))
            .execution_options(populate_existing=True)
        )
        roadmap = result.scalar_one_or_none()
        if roadmap is None:
            raise NotFound("Roadmap not found", code="ROADMAP_NOT_FOUND")
        return roadmap

    async def _load_module(self, module_id: int) -> Module:
        result = await self.db.execute(
            select(Module)
            .where(Module.id == module_id)
            .options(selectinload(Module.tasks))
            .execution_options(populate_existing=True)
        )
        module = result.scalar_one_or_none()
        if module is None:
            raise NotFound("Module not found", code="MODULE_NOT_FOUND")
        return module

    async def get_roadmap(self, roadmap_id: int, user_id: Optional[int] = None) -> RoadmapDetail:
        """Nested roadmap; with a user, tasks carry ``completed`` and the roadmap ``progress``."""
        roadmap = await self._load_roadmap(roadmap_id)
        detail = RoadmapDetail.model_validate(roadmap)

        if user_id is not None:
            done = set(await self.progress.completed_task_ids(user_id, roadmap_id))
            for module in detail.modules:
                for task in module.tasks:
                    task.completed = task.id in done
            detail.progress = await self.progress.roadmap_completion(user_id, roadmap_id)
        return detail

    async def get_module(self, module_id: int, user_id: Optional[int] = None) -> ModuleResponse:
        module = await self._load_module(module_id)
        detail = ModuleResponse.model_validate(module)

        if user_id is not None:
            done = set(await self.progress.completed_task_ids(user_id, module.roadmap_id))
            for task in detail.tasks:
                task.completed = task.id in done
            detail.progress = await self.progress.module_completion(user_id, module_id)
        return detail

    # ===================================================================
    # Writes
    # ===================================================================

    async def create_roadmap(self, data: RoadmapCreate, creator_id: int) -> RoadmapDetail:
        """Roadmap plus any nested modules and tasks, committed as one unit."""
        roadmap = Roadmap(
            title=data.title,
            description=data.description,
            difficulty=data.difficulty.value,
            duration=data.duration,
            created_by=creator_id,
            modules=[_build_module(m, i) for i, m in enumerate(data.modules, start=1)],
        )
        self.db.add(roadmap)
        try:
            await self.db.commit()
        except Exception:
            await self.db.rollback()
            raise

        logger.info(
            f"Roadmap {roadmap.id} '{roadmap.title}' created by user {creator_id} "
            f"with {len(data.modules)} modules"
        )
        return await self.get_roadmap(roadmap.id)

    async def update_roadmap(self, roadmap_id: int, data: RoadmapUpdate) -> RoadmapDetail:
        roadmap = await get_or_404(self.db, Roadmap, roadmap_id)
        changes = data.model_dump(exclude_unset=True)
        if "difficulty" in changes:
            changes["difficulty"] = changes["difficulty"].value
        for field, value in changes.items():
            setattr(roadmap, field, value)
        await self.db.commit()
        return await self.get_roadmap(roadmap_id)

    async def delete_roadmap(self, roadmap_id: int) -> None:
        roadmap = await get_or_404(self.db, Roadmap, roadmap_id)
        await self.db.delete(roadmap)
        await self.db.commit()
        logger.info(f"Roadmap {roadmap_id} deleted")

    async def _next_index(self, column, *criteria) -> int:
        current = await self.db.scalar(select(func.max(column)).where(*criteria))
        return (current or 0) + 1

    async def add_module(self, roadmap_id: int, data: ModuleCreate) -> ModuleResponse:
        await get_or_404(self.db, Roadmap, roadmap_id)
        position = await self._next_index(Module.order_index, Module.roadmap_id == roadmap_id)
        module = _build_module(data, position)
        module.roadmap_id = roadmap_id
        self.db.add(module)
        try:
            await self.progress.resync_roadmap(roadmap_id)
            await self.db.commit()
        except Exception:
            await self.db.rollback()
            raise
        return await self.get_module(module.id)

    async def update_module(self, module_id: int, data: ModuleUpdate) -> ModuleResponse:
        module = await get_or_404(self.db, Module, module_id)
        for field, value in data.model_dump(exclude_unset=True).items():
            setattr(module, field, value)
        await self.db.commit()
        return await self.get_module(module_id)

    async def delete_module(self, module_id: int) -> None:
        module = await get_or_404(self.db, Module, module_id)
        roadmap_id = module.roadmap_id
        await self.db.delete(module)
        await self.progress.resync_roadmap(roadmap_id)
        await self.db.commit()
        logger.info(f"Module {module_id} deleted")

    async def add_task(self, module_id: int, data: TaskCreate) -> TaskResponse:
        module = await get_or_404(self.db, Module, module_id)
        position = await self._next_index(Task.order_index, Task.module_id == module_id)
        task = _build_task(data, position)
        task.module_id = module_id
        self.db.add(task)
        await self.progress.resync_roadmap(module.roadmap_id)
        await self.db.commit()
        await self.db.refresh(task)
        return TaskResponse.model_validate(task)

    async def update_task(self, task_id: int, data: TaskUpdate) -> TaskResponse:
        task = await get_or_404(self.db, Task, task_id)
        for field, value in data.model_dump(exclude_unset=True).items():
            setattr(task, field, value)
        await self.db.commit()
        await self.db.refresh(task)
        return TaskResponse.model_validate(task)

    async def delete_task(self, task_id: int) -> None:
        task = await get_or_404(self.db, Task, task_id)
        roadmap_id = await self.db.scalar(
            select(Module.roadmap_id).where(Module.id == task.module_id)
        )
        await self.db.delete(task)
        await self.progress.resync_roadmap(roadmap_id)
        await self.db.commit()
        logger.info(f"Task {task_id} deleted")
