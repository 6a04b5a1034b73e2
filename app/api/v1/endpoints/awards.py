from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.dependencies import get_current_user
from app.db.session import get_db
from app.models.award import Badge, Certificate
from app.models.user import User
from app.schemas.award import AwardIssued, AwardRequest, AwardResponse
from app.services.award_service import AwardService

router = APIRouter()


@router.post("/badges/request", response_model=AwardIssued)
async def request_badge(
    request: AwardRequest,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    badge, created = await AwardService(db).request_badge(
        current_user,
        request.roadmap_id,
        recipient_name=request.recipient_name,
        roadmap_name=request.roadmap_name,
    )
    return AwardIssued(
        message="Badge issued successfully" if created else "Badge updated successfully",
        created=created,
        award=AwardResponse.model_validate(badge),
    )


@router.post("/certificates/request", response_model=AwardIssued)
async def request_certificate(
    request: AwardRequest,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    certificate, created = await AwardService(db).request_certificate(
        current_user,
        request.roadmap_id,
        recipient_name=request.recipient_name,
        roadmap_name=request.roadmap_name,
    )
    return AwardIssued(
        message="Certificate issued successfully" if created else "Certificate updated successfully",
        created=created,
        award=AwardResponse.model_validate(certificate),
    )


@router.get("/badges", response_model=List[AwardResponse])
async def list_my_badges(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    return await AwardService(db).list_awards(Badge, user_id=current_user.id)


@router.get("/certificates", response_model=List[AwardResponse])
async def list_my_certificates(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    return await AwardService(db).list_awards(Certificate, user_id=current_user.id)
