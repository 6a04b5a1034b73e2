from datetime import datetime, timezone
from typing import Type, TypeVar

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import NotFound

ModelT = TypeVar("ModelT")


def utcnow() -> datetime:
    # columns are naive and hold UTC
    return datetime.now(timezone.utc).replace(tzinfo=None)


async def get_or_404(db: AsyncSession, model: Type[ModelT], obj_id: int) -> ModelT:
    obj = await db.get(model, obj_id)
    if obj is None:
        name = model.__name__
        raise NotFound(f"{name} not found", code=f"{name.upper()}_NOT_FOUND")
    return obj
