from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.dependencies import require_admin
from app.db.session import get_db
from app.models.award import Badge, Certificate
from app.schemas.award import AdminAwardResponse, AdminStats
from app.schemas.token import TokenPayload
from app.schemas.user import RoleUpdate, UserResponse
from app.services.auth_service import AuthService
from app.services.award_service import AwardService

router = APIRouter()


@router.get("/stats", response_model=AdminStats)
async def get_admin_stats(
    db: AsyncSession = Depends(get_db),
    admin: TokenPayload = Depends(require_admin)
):
    return await AwardService(db).admin_stats()


@router.get("/users", response_model=List[UserResponse])
async def list_users(
    db: AsyncSession = Depends(get_db),
    admin: TokenPayload = Depends(require_admin)
):
    return await AuthService(db).list_users()


@router.put("/users/{user_id}/role", response_model=UserResponse)
async def set_user_role(
    user_id: int,
    update: RoleUpdate,
    db: AsyncSession = Depends(get_db),
    admin: TokenPayload = Depends(require_admin)
):
    return await AuthService(db).set_role(user_id, update.role)


@router.get("/badges", response_model=List[AdminAwardResponse])
async def list_badges(
    db: AsyncSession = Depends(get_db),
    admin: TokenPayload = Depends(require_admin)
):
    return await AwardService(db).list_awards_with_requesters(Badge)


@router.get("/certificates", response_model=List[AdminAwardResponse])
async def list_certificates(
    db: AsyncSession = Depends(get_db),
    admin: TokenPayload = Depends(require_admin)
):
    return await AwardService(db).list_awards_with_requesters(Certificate)
