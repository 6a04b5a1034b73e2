"""
Progress Service - task completion and every derived progress view.

All completion numbers in the API come from the counting queries in this
module: roadmap detail, module detail, the per-user progress list, user stats
and badge/certificate issuance. A roadmap's percentage is

    completed UserProgress rows / tasks reachable through its modules * 100

rounded half up, and 0 for a roadmap without tasks.
"""

import logging
import math
from typing import Dict, List, Optional, Tuple

from sqlalchemy import and_, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import Conflict, NotFound
from app.models.award import Badge, Certificate
from app.models.progress import UserProgress, UserRoadmap
from app.models.roadmap import Module, Roadmap, Task
from app.schemas.progress import (
    ActiveRoadmap,
    ActivityItem,
    CompletionStats,
    ModuleProgress,
    RoadmapProgress,
    TaskProgressResult,
    UserStats,
)
from app.services.common import get_or_404, utcnow

logger = logging.getLogger(__name__)


def completion_percentage(completed: int, total: int) -> int:
    if total <= 0:
        return 0
    return int(math.floor(completed * 100 / total + 0.5))


def build_stats(completed: int, total: int) -> CompletionStats:
    return CompletionStats(
        total_tasks=total,
        completed_tasks=completed,
        percentage=completion_percentage(completed, total),
        is_complete=total > 0 and completed >= total,
    )


def _apply_completion(enrolment: UserRoadmap, stats: CompletionStats) -> None:
    if stats.is_complete and enrolment.completed_at is None:
        enrolment.completed_at = utcnow()
        logger.info(f"User {enrolment.user_id} completed roadmap {enrolment.roadmap_id}")
    elif not stats.is_complete and enrolment.completed_at is not None:
        enrolment.completed_at = None


def _done_join(user_id: int):
    return and_(
        UserProgress.task_id == Task.id,
        UserProgress.user_id == user_id,
        UserProgress.completed.is_(True),
    )


class ProgressService:
    """
    Reads and writes per-user progress.
    Mutating methods commit; read methods never touch the transaction.
    """

    def __init__(self, db: AsyncSession):
        self.db = db

    # ===================================================================
    # Aggregation
    # ===================================================================

    async def _count(self, user_id: int, *criteria) -> CompletionStats:
        stmt = (
            select(func.count(Task.id), func.count(UserProgress.id))
            .select_from(Task)
            .join(Module, Task.module_id == Module.id)
            .outerjoin(UserProgress, _done_join(user_id))
            .where(*criteria)
        )
        total, completed = (await self.db.execute(stmt)).one()
        return build_stats(completed or 0, total or 0)

    async def roadmap_completion(self, user_id: int, roadmap_id: int) -> CompletionStats:
        return await self._count(user_id, Module.roadmap_id == roadmap_id)

    async def module_completion(self, user_id: int, module_id: int) -> CompletionStats:
        return await self._count(user_id, Module.id == module_id)

    async def completion_by_roadmap(
        self, user_id: int, roadmap_ids: List[int]
    ) -> Dict[int, CompletionStats]:
        """Same counts as roadmap_completion, grouped for many roadmaps at once."""
        if not roadmap_ids:
            return {}
        stmt = (
            select(Module.roadmap_id, func.count(Task.id), func.count(UserProgress.id))
            .select_from(Task)
            .join(Module, Task.module_id == Module.id)
            .outerjoin(UserProgress, _done_join(user_id))
            .where(Module.roadmap_id.in_(roadmap_ids))
            .group_by(Module.roadmap_id)
        )
        rows = (await self.db.execute(stmt)).all()
        stats = {roadmap_id: build_stats(0, 0) for roadmap_id in roadmap_ids}
        for roadmap_id, total, completed in rows:
            stats[roadmap_id] = build_stats(completed, total)
        return stats

    async def module_breakdown(self, user_id: int, roadmap_id: int) -> List[ModuleProgress]:
        stmt = (
            select(
                Module.id,
                Module.title,
                func.count(Task.id),
                func.count(UserProgress.id),
            )
            .select_from(Module)
            .outerjoin(Task, Task.module_id == Module.id)
            .outerjoin(UserProgress, _done_join(user_id))
            .where(Module.roadmap_id == roadmap_id)
            .group_by(Module.id, Module.title, Module.order_index)
            .order_by(Module.order_index, Module.id)
        )
        rows = (await self.db.execute(stmt)).all()
        return [
            ModuleProgress(
                module_id=module_id,
                title=title,
                total_tasks=total,
                completed_tasks=completed,
                percentage=completion_percentage(completed, total),
            )
            for module_id, title, total, completed in rows
        ]

    async def completed_task_ids(self, user_id: int, roadmap_id: int) -> List[int]:
        stmt = (
            select(UserProgress.task_id)
            .join(Task, UserProgress.task_id == Task.id)
            .join(Module, Task.module_id == Module.id)
            .where(
                Module.roadmap_id == roadmap_id,
                UserProgress.user_id == user_id,
                UserProgress.completed.is_(True),
            )
            .order_by(UserProgress.task_id)
        )
        return list((await self.db.execute(stmt)).scalars().all())

    # ===================================================================
    # Mutations
    # ===================================================================

    async def _get_progress(self, user_id: int, task_id: int) -> Optional[UserProgress]:
        result = await self.db.execute(
            select(UserProgress).where(
                UserProgress.user_id == user_id,
                UserProgress.task_id == task_id,
            )
        )
        return result.scalar_one_or_none()

    async def _get_enrolment(self, user_id: int, roadmap_id: int) -> Optional[UserRoadmap]:
        result = await self.db.execute(
            select(UserRoadmap).where(
                UserRoadmap.user_id == user_id,
                UserRoadmap.roadmap_id == roadmap_id,
            )
        )
        return result.scalar_one_or_none()

    async def _ensure_started(self, user_id: int, roadmap_id: int) -> Tuple[UserRoadmap, bool]:
        enrolment = await self._get_enrolment(user_id, roadmap_id)
        if enrolment is not None:
            return enrolment, False
        enrolment = UserRoadmap(user_id=user_id, roadmap_id=roadmap_id, started_at=utcnow())
        self.db.add(enrolment)
        await self.db.flush()
        return enrolment, True

    async def start_roadmap(self, user_id: int, roadmap_id: int) -> Tuple[UserRoadmap, bool]:
        await get_or_404(self.db, Roadmap, roadmap_id)
        try:
            enrolment, created = await self._ensure_started(user_id, roadmap_id)
            await self.db.commit()
        except IntegrityError:
            await self.db.rollback()
            raise Conflict("Roadmap was started concurrently", code="CONCURRENT_UPDATE")
        if created:
            logger.info(f"User {user_id} started roadmap {roadmap_id}")
        return enrolment, created

    async def set_task_completion(
        self, user_id: int, task_id: int, completed: Optional[bool] = None
    ) -> TaskProgressResult:
        """
        Mark a task done (upsert) or not done (delete the row).

        ``completed=None`` inverts whatever is stored. That read-then-write
        is not atomic: two concurrent toggles from the same user can cancel
        out, so clients should always send an explicit flag.
        """
        row = (
            await self.db.execute(
                select(Task.id, Module.roadmap_id)
                .join(Module, Task.module_id == Module.id)
                .where(Task.id == task_id)
            )
        ).one_or_none()
        if row is None:
            raise NotFound("Task not found", code="TASK_NOT_FOUND")
        roadmap_id = row.roadmap_id

        progress = await self._get_progress(user_id, task_id)
        if completed is None:
            logger.warning(
                f"Deprecated toggle request from user {user_id} for task {task_id}; "
                "send an explicit 'completed' flag"
            )
            completed = not (progress is not None and progress.completed)

        try:
            if completed:
                now = utcnow()
                if progress is None:
                    self.db.add(UserProgress(
                        user_id=user_id, task_id=task_id, completed=True, completed_at=now
                    ))
                else:
                    progress.completed = True
                    progress.completed_at = now
                await self._ensure_started(user_id, roadmap_id)
            elif progress is not None:
                await self.db.delete(progress)
            await self.db.flush()

            stats = await self.roadmap_completion(user_id, roadmap_id)
            await self._sync_roadmap_completion(user_id, roadmap_id, stats)
            await self.db.commit()
        except IntegrityError:
            await self.db.rollback()
            raise Conflict("Progress was updated concurrently", code="CONCURRENT_UPDATE")

        return TaskProgressResult(
            message="Progress updated successfully",
            task_id=task_id,
            completed=completed,
            roadmap_id=roadmap_id,
            roadmap_completed=stats.is_complete,
            progress=stats,
        )

    async def _sync_roadmap_completion(
        self, user_id: int, roadmap_id: int, stats: CompletionStats
    ) -> None:
        enrolment = await self._get_enrolment(user_id, roadmap_id)
        if enrolment is not None:
            _apply_completion(enrolment, stats)

    async def resync_roadmap(self, roadmap_id: int) -> None:
        """
        Re-evaluate ``completed_at`` for everyone enrolled in a roadmap.

        Called by content edits that add or remove tasks, before their commit,
        so a finished roadmap that gains a task is reopened and one that loses
        its last open task is closed.
        """
        result = await self.db.execute(
            select(UserRoadmap).where(UserRoadmap.roadmap_id == roadmap_id)
        )
        for enrolment in result.scalars().all():
            stats = await self.roadmap_completion(enrolment.user_id, roadmap_id)
            _apply_completion(enrolment, stats)

    # ===================================================================
    # Per-user views
    # ===================================================================

    async def roadmap_progress(self, user_id: int, roadmap_id: int) -> RoadmapProgress:
        roadmap = await get_or_404(self.db, Roadmap, roadmap_id)
        enrolment = await self._get_enrolment(user_id, roadmap_id)
        stats = await self.roadmap_completion(user_id, roadmap_id)
        return RoadmapProgress(
            roadmap_id=roadmap.id,
            roadmap_title=roadmap.title,
            started_at=enrolment.started_at if enrolment else None,
            completed_at=enrolment.completed_at if enrolment else None,
            total_tasks=stats.total_tasks,
            completed_tasks=stats.completed_tasks,
            percentage=stats.percentage,
            modules=await self.module_breakdown(user_id, roadmap_id),
            completed_task_ids=await self.completed_task_ids(user_id, roadmap_id),
        )

    async def _started_roadmaps(self, user_id: int):
        result = await self.db.execute(
            select(UserRoadmap, Roadmap)
            .join(Roadmap, UserRoadmap.roadmap_id == Roadmap.id)
            .where(UserRoadmap.user_id == user_id)
            .order_by(UserRoadmap.started_at.desc(), UserRoadmap.id.desc())
        )
        return result.all()

    async def user_progress(self, user_id: int) -> List[RoadmapProgress]:
        rows = await self._started_roadmaps(user_id)
        stats = await self.completion_by_roadmap(user_id, [roadmap.id for _, roadmap in rows])
        return [
            RoadmapProgress(
                roadmap_id=roadmap.id,
                roadmap_title=roadmap.title,
                started_at=enrolment.started_at,
                completed_at=enrolment.completed_at,
                total_tasks=stats[roadmap.id].total_tasks,
                completed_tasks=stats[roadmap.id].completed_tasks,
                percentage=stats[roadmap.id].percentage,
            )
            for enrolment, roadmap in rows
        ]

    async def active_roadmaps(self, user_id: int) -> List[ActiveRoadmap]:
        rows = await self._started_roadmaps(user_id)
        stats = await self.completion_by_roadmap(user_id, [roadmap.id for _, roadmap in rows])
        return [
            ActiveRoadmap(
                roadmap_id=roadmap.id,
                title=roadmap.title,
                difficulty=roadmap.difficulty,
                started_at=enrolment.started_at,
                percentage=stats[roadmap.id].percentage,
            )
            for enrolment, roadmap in rows
            if not stats[roadmap.id].is_complete
        ]

    async def user_stats(self, user_id: int) -> UserStats:
        rows = await self._started_roadmaps(user_id)
        stats = await self.completion_by_roadmap(user_id, [roadmap.id for _, roadmap in rows])

        tasks_completed = await self.db.scalar(
            select(func.count(UserProgress.id)).where(
                UserProgress.user_id == user_id,
                UserProgress.completed.is_(True),
            )
        )
        badges = await self.db.scalar(
            select(func.count(Badge.id)).where(Badge.user_id == user_id)
        )
        certificates = await self.db.scalar(
            select(func.count(Certificate.id)).where(Certificate.user_id == user_id)
        )
        return UserStats(
            roadmaps_started=len(rows),
            roadmaps_completed=sum(1 for s in stats.values() if s.is_complete),
            tasks_completed=tasks_completed or 0,
            badges_earned=badges or 0,
            certificates_earned=certificates or 0,
        )

    async def activity(self, user_id: int, limit: int = 10) -> List[ActivityItem]:
        items: List[ActivityItem] = []

        completions = await self.db.execute(
            select(Task.title, Roadmap.title, UserProgress.completed_at)
            .select_from(UserProgress)
            .join(Task, UserProgress.task_id == Task.id)
            .join(Module, Task.module_id == Module.id)
            .join(Roadmap, Module.roadmap_id == Roadmap.id)
            .where(UserProgress.user_id == user_id, UserProgress.completed.is_(True))
            .order_by(UserProgress.completed_at.desc())
            .limit(limit)
        )
        for task_title, roadmap_title, completed_at in completions.all():
            items.append(ActivityItem(
                type="task_completed",
                description=f"Completed task '{task_title}' in {roadmap_title}",
                created_at=completed_at,
            ))

        starts = await self.db.execute(
            select(Roadmap.title, UserRoadmap.started_at)
            .join(Roadmap, UserRoadmap.roadmap_id == Roadmap.id)
            .where(UserRoadmap.user_id == user_id)
            .order_by(UserRoadmap.started_at.desc())
            .limit(limit)
        )
        for roadmap_title, started_at in starts.all():
            items.append(ActivityItem(
                type="roadmap_started",
                description=f"Started roadmap: {roadmap_title}",
                created_at=started_at,
            ))

        for model, kind in ((Badge, "badge"), (Certificate, "certificate")):
            awards = await self.db.execute(
                select(Roadmap.title, model.updated_at)
                .join(Roadmap, model.roadmap_id == Roadmap.id)
                .where(model.user_id == user_id)
                .order_by(model.updated_at.desc())
                .limit(limit)
            )
            for roadmap_title, issued_at in awards.all():
                items.append(ActivityItem(
                    type=f"{kind}_issued",
                    description=f"Earned a {kind} for {roadmap_title}",
                    created_at=issued_at,
                ))

        items.sort(key=lambda item: (item.created_at is not None, item.created_at), reverse=True)
        return items[:limit]
