import logging
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import Conflict, InvalidCredentials
from app.core.security import create_access_token, get_password_hash, verify_password
from app.models.user import User, UserRole
from app.schemas.token import Token
from app.schemas.user import UserCreate, UserLogin, UserResponse, UserUpdate
from app.services.common import get_or_404, utcnow

logger = logging.getLogger(__name__)


class AuthService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_by_email(self, email: str) -> Optional[User]:
        result = await self.db.execute(select(User).where(User.email == email.strip().lower()))
        return result.scalar_one_or_none()

    async def register(self, data: UserCreate, role: UserRole = UserRole.USER) -> User:
        if await self.get_by_email(data.email):
            raise Conflict("Email already registered", code="EMAIL_EXISTS")

        user = User(
            username=data.username,
            email=data.email,
            hashed_password=get_password_hash(data.password),
            role=role.value,
        )
        self.db.add(user)
        try:
            await self.db.commit()
        except IntegrityError:
            # lost a race with a concurrent registration for the same email
            await self.db.rollback()
            raise Conflict("Email already registered", code="EMAIL_EXISTS")
        await self.db.refresh(user)

        logger.info(f"Registered user {user.id} ({user.email})")
        return user

    async def login(self, data: UserLogin) -> Token:
        user = await self.get_by_email(data.email)
        # same error for unknown email and wrong password
        if not user or not verify_password(data.password, user.hashed_password):
            logger.info(f"Failed login for {data.email}")
            raise InvalidCredentials()

        user.last_login = utcnow()
        await self.db.commit()
        await self.db.refresh(user)

        token = create_access_token(user_id=user.id, email=user.email, role=user.role)
        return Token(token=token, user=UserResponse.model_validate(user))

    async def update_profile(self, user: User, data: UserUpdate) -> User:
        user.username = data.username
        await self.db.commit()
        await self.db.refresh(user)
        return user

    async def list_users(self) -> List[User]:
        result = await self.db.execute(select(User).order_by(User.id))
        return list(result.scalars().all())

    async def set_role(self, user_id: int, role: UserRole) -> User:
        user = await get_or_404(self.db, User, user_id)
        user.role = role.value
        await self.db.commit()
        await self.db.refresh(user)
        logger.info(f"User {user_id} role set to {role.value}")
        return user

    async def ensure_admin(self, email: str, username: str, password: str) -> User:
        """Create the bootstrap admin, or promote an existing account with that email."""
        user = await self.get_by_email(email)
        if user is None:
            user = await self.register(
                UserCreate(username=username, email=email, password=password),
                role=UserRole.ADMIN,
            )
            logger.info(f"Bootstrap admin {user.email} created")
        elif not user.is_admin:
            user = await self.set_role(user.id, UserRole.ADMIN)
        return user
