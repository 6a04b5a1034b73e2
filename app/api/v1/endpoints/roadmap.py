from typing import List, Optional

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.dependencies import get_current_identity, get_optional_identity, require_admin
from app.db.session import get_db
from app.schemas.progress import RoadmapProgress
from app.schemas.roadmap import (
    ModuleCreate,
    ModuleResponse,
    RoadmapCreate,
    RoadmapDetail,
    RoadmapSummary,
    RoadmapUpdate,
)
from app.schemas.token import TokenPayload
from app.services.progress_service import ProgressService
from app.services.roadmap_service import RoadmapService

router = APIRouter()


@router.get("", response_model=List[RoadmapSummary])
async def list_roadmaps(db: AsyncSession = Depends(get_db)):
    return await RoadmapService(db).list_roadmaps()


@router.get("/{roadmap_id}", response_model=RoadmapDetail)
async def get_roadmap(
    roadmap_id: int,
    db: AsyncSession = Depends(get_db),
    identity: Optional[TokenPayload] = Depends(get_optional_identity)
):
    user_id = identity.user_id if identity else None
    return await RoadmapService(db).get_roadmap(roadmap_id, user_id=user_id)


@router.post("", response_model=RoadmapDetail, status_code=status.HTTP_201_CREATED)
async def create_roadmap(
    data: RoadmapCreate,
    db: AsyncSession = Depends(get_db),
    admin: TokenPayload = Depends(require_admin)
):
    return await RoadmapService(db).create_roadmap(data, creator_id=admin.user_id)


@router.put("/{roadmap_id}", response_model=RoadmapDetail)
async def update_roadmap(
    roadmap_id: int,
    data: RoadmapUpdate,
    db: AsyncSession = Depends(get_db),
    admin: TokenPayload = Depends(require_admin)
):
    return await RoadmapService(db).update_roadmap(roadmap_id, data)


@router.delete("/{roadmap_id}")
async def delete_roadmap(
    roadmap_id: int,
    db: AsyncSession = Depends(get_db),
    admin: TokenPayload = Depends(require_admin)
):
    await RoadmapService(db).delete_roadmap(roadmap_id)
    return {"message": "Roadmap deleted successfully"}


@router.post("/{roadmap_id}/modules", response_model=ModuleResponse, status_code=status.HTTP_201_CREATED)
async def add_module(
    roadmap_id: int,
    data: ModuleCreate,
    db: AsyncSession = Depends(get_db),
    admin: TokenPayload = Depends(require_admin)
):
    return await RoadmapService(db).add_module(roadmap_id, data)


@router.post("/{roadmap_id}/start")
async def start_roadmap(
    roadmap_id: int,
    db: AsyncSession = Depends(get_db),
    identity: TokenPayload = Depends(get_current_identity)
):
    enrolment, created = await ProgressService(db).start_roadmap(identity.user_id, roadmap_id)
    return {
        "message": "Roadmap started successfully" if created else "Roadmap already started",
        "roadmap_id": roadmap_id,
        "started_at": enrolment.started_at,
        "already_started": not created,
    }


@router.get("/{roadmap_id}/progress", response_model=RoadmapProgress)
async def get_roadmap_progress(
    roadmap_id: int,
    db: AsyncSession = Depends(get_db),
    identity: TokenPayload = Depends(get_current_identity)
):
    return await ProgressService(db).roadmap_progress(identity.user_id, roadmap_id)
