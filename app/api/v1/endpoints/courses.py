from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.dependencies import require_admin
from app.db.session import get_db
from app.schemas.course import CourseCreate, CourseDetail, CourseSummary
from app.schemas.token import TokenPayload
from app.services.course_service import CourseService

router = APIRouter()


@router.get("", response_model=List[CourseSummary])
async def list_courses(db: AsyncSession = Depends(get_db)):
    return await CourseService(db).list_courses()


@router.get("/{course_id}", response_model=CourseDetail)
async def get_course(course_id: int, db: AsyncSession = Depends(get_db)):
    return await CourseService(db).get_course(course_id)


@router.post("", response_model=CourseDetail, status_code=status.HTTP_201_CREATED)
async def create_course(
    data: CourseCreate,
    db: AsyncSession = Depends(get_db),
    admin: TokenPayload = Depends(require_admin)
):
    return await CourseService(db).create_course(data, creator_id=admin.user_id)


@router.delete("/{course_id}")
async def delete_course(
    course_id: int,
    db: AsyncSession = Depends(get_db),
    admin: TokenPayload = Depends(require_admin)
):
    await CourseService(db).delete_course(course_id)
    return {"message": "Course deleted successfully"}
