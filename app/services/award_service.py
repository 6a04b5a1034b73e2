"""
Badges and certificates.

Both are issued the same way: the roadmap must be fully complete for the
requesting user, and a second request for the same (user, roadmap) updates
the existing record instead of creating another one.
"""

import logging
from typing import List, Optional, Tuple, Type, Union

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import Conflict, IncompleteRoadmap
from app.models.award import Badge, Certificate
from app.models.roadmap import Module, Roadmap, Task
from app.models.user import User
from app.schemas.award import AdminAwardResponse, AdminStats, AwardResponse
from app.services.common import get_or_404, utcnow
from app.services.progress_service import ProgressService

logger = logging.getLogger(__name__)

Award = Union[Badge, Certificate]


class AwardService:
    def __init__(self, db: AsyncSession):
        self.db = db
        self.progress = ProgressService(db)

    async def _issue(
        self,
        model: Type[Award],
        kind: str,
        user: User,
        roadmap_id: int,
        recipient_name: Optional[str] = None,
        roadmap_name: Optional[str] = None,
    ) -> Tuple[Award, bool]:
        roadmap = await get_or_404(self.db, Roadmap, roadmap_id)

        stats = await self.progress.roadmap_completion(user.id, roadmap_id)
        if not stats.is_complete:
            raise IncompleteRoadmap(
                f"Roadmap must be completed to request a {kind} "
                f"({stats.completed_tasks}/{stats.total_tasks} tasks done)"
            )

        result = await self.db.execute(
            select(model).where(model.user_id == user.id, model.roadmap_id == roadmap_id)
        )
        award = result.scalar_one_or_none()
        created = award is None
        if created:
            award = model(user_id=user.id, roadmap_id=roadmap_id)
            self.db.add(award)

        award.recipient_name = recipient_name or user.username
        award.roadmap_name = roadmap_name or roadmap.title
        award.completion_date = utcnow().date()
        if not created:
            award.updated_at = utcnow()

        try:
            await self.db.flush()
            award.url = f"/{kind}s/{award.id}"
            await self.db.commit()
        except IntegrityError:
            await self.db.rollback()
            raise Conflict(f"{kind.capitalize()} was issued concurrently", code="CONCURRENT_UPDATE")
        await self.db.refresh(award)

        logger.info(
            f"{kind.capitalize()} {award.id} {'issued' if created else 're-issued'} "
            f"to user {user.id} for roadmap {roadmap_id}"
        )
        return award, created

    async def request_badge(self, user: User, roadmap_id: int, **names) -> Tuple[Badge, bool]:
        return await self._issue(Badge, "badge", user, roadmap_id, **names)

    async def request_certificate(self, user: User, roadmap_id: int, **names) -> Tuple[Certificate, bool]:
        return await self._issue(Certificate, "certificate", user, roadmap_id, **names)

    async def list_awards(self, model: Type[Award], user_id: int) -> List[Award]:
        result = await self.db.execute(
            select(model)
            .where(model.user_id == user_id)
            .order_by(model.issued_at.desc(), model.id.desc())
        )
        return list(result.scalars().all())

    async def list_awards_with_requesters(self, model: Type[Award]) -> List[AdminAwardResponse]:
        result = await self.db.execute(
            select(model, User.username, User.email, Roadmap.title)
            .join(User, model.user_id == User.id)
            .join(Roadmap, model.roadmap_id == Roadmap.id)
            .order_by(model.issued_at.desc(), model.id.desc())
        )
        return [
            AdminAwardResponse(
                **AwardResponse.model_validate(award).model_dump(),
                username=username,
                email=email,
                roadmap_title=roadmap_title,
            )
            for award, username, email, roadmap_title in result.all()
        ]

    async def admin_stats(self) -> AdminStats:
        async def count(column) -> int:
            return (await self.db.scalar(select(func.count(column)))) or 0

        return AdminStats(
            total_users=await count(User.id),
            total_roadmaps=await count(Roadmap.id),
            total_modules=await count(Module.id),
            total_tasks=await count(Task.id),
            badges_issued=await count(Badge.id),
            certificates_issued=await count(Certificate.id),
        )
