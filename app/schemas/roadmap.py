from pydantic import BaseModel, Field, model_validator
from typing import ClassVar, List, Optional, Tuple
from datetime import datetime

from app.models.roadmap import Difficulty
from app.schemas.progress import CompletionStats
from app.schemas.user import NonBlankStr


class PartialUpdate(BaseModel):
    """PUT body: omitted fields are left alone, explicit nulls clear the column."""

    not_nullable: ClassVar[Tuple[str, ...]] = ()

    @model_validator(mode="after")
    def reject_null_required(self):
        for name in self.not_nullable:
            if name in self.model_fields_set and getattr(self, name) is None:
                raise ValueError(f"{name} cannot be null")
        return self


class TaskCreate(BaseModel):
    title: NonBlankStr = Field(..., max_length=255)
    description: Optional[str] = None
    resource_url: Optional[str] = Field(None, max_length=500)
    order_index: Optional[int] = Field(None, ge=0)


class TaskUpdate(PartialUpdate):
    not_nullable = ("title", "order_index")

    title: Optional[NonBlankStr] = Field(None, max_length=255)
    description: Optional[str] = None
    resource_url: Optional[str] = Field(None, max_length=500)
    order_index: Optional[int] = Field(None, ge=0)


class ModuleCreate(BaseModel):
    title: NonBlankStr = Field(..., max_length=255)
    description: Optional[str] = None
    order_index: Optional[int] = Field(None, ge=0)
    tasks: List[TaskCreate] = []


class ModuleUpdate(PartialUpdate):
    not_nullable = ("title", "order_index")

    title: Optional[NonBlankStr] = Field(None, max_length=255)
    description: Optional[str] = None
    order_index: Optional[int] = Field(None, ge=0)


class RoadmapCreate(BaseModel):
    title: NonBlankStr = Field(..., max_length=255)
    description: NonBlankStr
    difficulty: Difficulty = Difficulty.BEGINNER
    duration: Optional[int] = Field(30, ge=1)
    modules: List[ModuleCreate] = []


class RoadmapUpdate(PartialUpdate):
    not_nullable = ("title", "description", "difficulty")

    title: Optional[NonBlankStr] = Field(None, max_length=255)
    description: Optional[NonBlankStr] = None
    difficulty: Optional[Difficulty] = None
    duration: Optional[int] = Field(None, ge=1)


class TaskResponse(BaseModel):
    id: int
    module_id: int
    title: str
    description: Optional[str]
    resource_url: Optional[str]
    order_index: int
    completed: Optional[bool] = None

    class Config:
        from_attributes = True


class ModuleResponse(BaseModel):
    id: int
    roadmap_id: int
    title: str
    description: Optional[str]
    order_index: int
    tasks: List[TaskResponse] = []
    progress: Optional[CompletionStats] = None

    class Config:
        from_attributes = True


class RoadmapSummary(BaseModel):
    id: int
    title: str
    description: Optional[str]
    difficulty: str
    duration: Optional[int]
    created_by: Optional[int]
    created_at: Optional[datetime]
    updated_at: Optional[datetime]
    module_count: int = 0
    task_count: int = 0

    class Config:
        from_attributes = True


class RoadmapDetail(BaseModel):
    id: int
    title: str
    description: Optional[str]
    difficulty: str
    duration: Optional[int]
    created_by: Optional[int]
    created_at: Optional[datetime]
    updated_at: Optional[datetime]
    modules: List[ModuleResponse] = []
    progress: Optional[CompletionStats] = None

    class Config:
        from_attributes = True
