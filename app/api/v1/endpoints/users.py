from typing import List

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.dependencies import get_current_identity
from app.core.errors import Forbidden
from app.db.session import get_db
from app.schemas.progress import ActiveRoadmap, ActivityItem, RoadmapProgress, UserStats
from app.schemas.token import TokenPayload
from app.services.progress_service import ProgressService

router = APIRouter()


@router.get("/user/stats", response_model=UserStats)
async def get_user_stats(
    db: AsyncSession = Depends(get_db),
    identity: TokenPayload = Depends(get_current_identity)
):
    return await ProgressService(db).user_stats(identity.user_id)


@router.get("/user/progress", response_model=List[RoadmapProgress])
async def get_my_progress(
    db: AsyncSession = Depends(get_db),
    identity: TokenPayload = Depends(get_current_identity)
):
    return await ProgressService(db).user_progress(identity.user_id)


@router.get("/user/active-roadmaps", response_model=List[ActiveRoadmap])
async def get_active_roadmaps(
    db: AsyncSession = Depends(get_db),
    identity: TokenPayload = Depends(get_current_identity)
):
    return await ProgressService(db).active_roadmaps(identity.user_id)


@router.get("/user/activity", response_model=List[ActivityItem])
async def get_activity(
    limit: int = Query(10, ge=1, le=100),
    db: AsyncSession = Depends(get_db),
    identity: TokenPayload = Depends(get_current_identity)
):
    return await ProgressService(db).activity(identity.user_id, limit=limit)


@router.get("/progress/{user_id}", response_model=List[RoadmapProgress])
async def get_user_progress(
    user_id: int,
    db: AsyncSession = Depends(get_db),
    identity: TokenPayload = Depends(get_current_identity)
):
    if identity.user_id != user_id and not identity.is_admin:
        raise Forbidden("Access denied", code="ACCESS_DENIED")
    return await ProgressService(db).user_progress(user_id)
