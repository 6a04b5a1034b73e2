import logging
from typing import List

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.core.errors import NotFound
from app.models.course import Course, CourseModule, Lesson
from app.models.user import User
from app.schemas.course import CourseCreate, CourseDetail, CourseSummary
from app.services.common import get_or_404

logger = logging.getLogger(__name__)


class CourseService:
    """Course catalogue: courses -> modules -> lessons. Browsing is public."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def list_courses(self) -> List[CourseSummary]:
        module_count = (
            select(func.count(CourseModule.id))
            .where(CourseModule.course_id == Course.id)
            .correlate(Course)
            .scalar_subquery()
        )
        lesson_count = (
            select(func.count(Lesson.id))
            .join(CourseModule, Lesson.module_id == CourseModule.id)
            .where(CourseModule.course_id == Course.id)
            .correlate(Course)
            .scalar_subquery()
        )
        result = await self.db.execute(
            select(Course, User.username, module_count, lesson_count)
            .outerjoin(User, Course.created_by == User.id)
            .order_by(Course.created_at.desc(), Course.id.desc())
        )

        summaries = []
        for course, creator_name, modules, lessons in result.all():
            summary = CourseSummary.model_validate(course)
            summary.creator_name = creator_name
            summary.module_count = modules or 0
            summary.lesson_count = lessons or 0
            summaries.append(summary)
        return summaries

    async def get_course(self, course_id: int) -> CourseDetail:
        result = await self.db.execute(
            select(Course)
            .where(Course.id == course_id)
            .options(selectinload(Course.modules).selectinload(CourseModule.lessons))
            .execution_options(populate_existing=True)
        )
        course = result.scalar_one_or_none()
        if course is None:
            raise NotFound("Course not found", code="COURSE_NOT_FOUND")
        return CourseDetail.model_validate(course)

    async def create_course(self, data: CourseCreate, creator_id: int) -> CourseDetail:
        course = Course(
            title=data.title,
            description=data.description,
            difficulty=data.difficulty.value,
            duration=data.duration,
            created_by=creator_id,
            modules=[
                CourseModule(
                    title=m.title,
                    order_index=m.order_index if m.order_index is not None else i,
                    lessons=[
                        Lesson(
                            title=lesson.title,
                            description=lesson.description,
                            resource_url=lesson.resource_url or None,
                            order_index=lesson.order_index if lesson.order_index is not None else j,
                        )
                        for j, lesson in enumerate(m.lessons, start=1)
                    ],
                )
                for i, m in enumerate(data.modules, start=1)
            ],
        )
        self.db.add(course)
        try:
            await self.db.commit()
        except Exception:
            await self.db.rollback()
            raise

        logger.info(f"Course {course.id} '{course.title}' created by user {creator_id}")
        return await self.get_course(course.id)

    async def delete_course(self, course_id: int) -> None:
        course = await get_or_404(self.db, Course, course_id)
        await self.db.delete(course)
        await self.db.commit()
        logger.info(f"Course {course_id} deleted")
