from typing import Optional

from fastapi import Depends, Request, Response
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import AppError, Forbidden, InvalidToken, MissingToken
from app.core.logging import audit_logger
from app.core.security import decode_access_token, needs_refresh
from app.db.session import get_db
from app.models.user import User
from app.schemas.token import TokenPayload

REFRESH_HEADER = "X-Token-Refresh-Needed"

bearer_scheme = HTTPBearer(auto_error=False)


async def get_current_identity(
    response: Response,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> TokenPayload:
    if credentials is None or not credentials.credentials:
        raise MissingToken()

    payload = decode_access_token(credentials.credentials)
    if needs_refresh(payload):
        response.headers[REFRESH_HEADER] = "true"
    return payload


async def get_optional_identity(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> Optional[TokenPayload]:
    if credentials is None or not credentials.credentials:
        return None
    try:
        return decode_access_token(credentials.credentials)
    except AppError:
        return None


async def get_current_user(
    identity: TokenPayload = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db),
) -> User:
    user = await db.get(User, identity.user_id)
    if user is None:
        raise InvalidToken("Token user no longer exists.")
    return user


async def require_admin(
    request: Request,
    identity: TokenPayload = Depends(get_current_identity),
) -> TokenPayload:
    if not identity.is_admin:
        audit_logger.warning(
            f"Access denied for user {identity.user_id} ({identity.email}) "
            f"attempting {request.method} {request.url.path}"
        )
        raise Forbidden()

    audit_logger.info(
        f"Admin action: {request.method} {request.url.path} "
        f"by user {identity.user_id} ({identity.email})"
    )
    return identity
