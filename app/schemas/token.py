from pydantic import BaseModel

from app.schemas.user import UserResponse


class TokenPayload(BaseModel):
    user_id: int
    email: str
    role: str
    exp: int

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"


class Token(BaseModel):
    token: str
    token_type: str = "bearer"
    user: UserResponse
