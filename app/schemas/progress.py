from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import datetime


class CompletionStats(BaseModel):
    total_tasks: int
    completed_tasks: int
    percentage: int
    is_complete: bool


class TaskProgressUpdate(BaseModel):
    task_id: int = Field(..., alias="taskId")
    # omitted -> legacy toggle of the stored state
    completed: Optional[bool] = None

    model_config = {"populate_by_name": True}


class TaskProgressResult(BaseModel):
    message: str
    task_id: int
    completed: bool
    roadmap_id: int
    roadmap_completed: bool
    progress: CompletionStats


class ModuleProgress(BaseModel):
    module_id: int
    title: str
    total_tasks: int
    completed_tasks: int
    percentage: int


class RoadmapProgress(BaseModel):
    roadmap_id: int
    roadmap_title: str
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    total_tasks: int
    completed_tasks: int
    percentage: int
    modules: List[ModuleProgress] = []
    completed_task_ids: List[int] = []


class ActiveRoadmap(BaseModel):
    roadmap_id: int
    title: str
    difficulty: str
    started_at: Optional[datetime] = None
    percentage: int


class UserStats(BaseModel):
    roadmaps_started: int
    roadmaps_completed: int
    tasks_completed: int
    badges_earned: int
    certificates_earned: int


class ActivityItem(BaseModel):
    type: str
    description: str
    created_at: Optional[datetime] = None
