from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.dependencies import get_current_identity
from app.db.session import get_db
from app.schemas.progress import TaskProgressResult, TaskProgressUpdate
from app.schemas.token import TokenPayload
from app.services.progress_service import ProgressService

router = APIRouter()


@router.post("/progress/task", response_model=TaskProgressResult)
async def update_task_progress(
    update: TaskProgressUpdate,
    db: AsyncSession = Depends(get_db),
    identity: TokenPayload = Depends(get_current_identity)
):
    return await ProgressService(db).set_task_completion(
        identity.user_id, update.task_id, update.completed
    )
