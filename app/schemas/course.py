from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import datetime

from app.models.roadmap import Difficulty
from app.schemas.user import NonBlankStr


class LessonCreate(BaseModel):
    title: NonBlankStr = Field(..., max_length=255)
    description: Optional[str] = None
    resource_url: Optional[str] = Field(None, max_length=500)
    order_index: Optional[int] = Field(None, ge=0)


class CourseModuleCreate(BaseModel):
    title: NonBlankStr = Field(..., max_length=255)
    order_index: Optional[int] = Field(None, ge=0)
    lessons: List[LessonCreate] = []


class CourseCreate(BaseModel):
    title: NonBlankStr = Field(..., max_length=255)
    description: Optional[str] = None
    difficulty: Difficulty = Difficulty.BEGINNER
    duration: Optional[int] = Field(None, ge=1)
    modules: List[CourseModuleCreate] = []


class LessonResponse(BaseModel):
    id: int
    title: str
    description: Optional[str]
    resource_url: Optional[str]
    order_index: int

    class Config:
        from_attributes = True


class CourseModuleResponse(BaseModel):
    id: int
    title: str
    order_index: int
    lessons: List[LessonResponse] = []

    class Config:
        from_attributes = True


class CourseSummary(BaseModel):
    id: int
    title: str
    description: Optional[str]
    difficulty: str
    duration: Optional[int]
    created_by: Optional[int]
    created_at: Optional[datetime]
    creator_name: Optional[str] = None
    module_count: int = 0
    lesson_count: int = 0

    class Config:
        from_attributes = True


class CourseDetail(BaseModel):
    id: int
    title: str
    description: Optional[str]
    difficulty: str
    duration: Optional[int]
    created_by: Optional[int]
    created_at: Optional[datetime]
    modules: List[CourseModuleResponse] = []

    class Config:
        from_attributes = True
