from datetime import datetime, timedelta, timezone
from typing import Optional

import bcrypt
import jwt

from app.core.config import settings
from app.core.errors import InvalidToken, TokenExpired
from app.schemas.token import TokenPayload

# bcrypt only looks at the first 72 bytes of its input
MAX_PASSWORD_BYTES = 72


def get_password_hash(password: str) -> str:
    salt = bcrypt.gensalt(rounds=settings.BCRYPT_ROUNDS)
    return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    try:
        return bcrypt.checkpw(plain_password.encode("utf-8"), hashed_password.encode("utf-8"))
    except ValueError:
        # over-long input or a corrupt stored hash
        return False


def create_access_token(
    user_id: int,
    email: str,
    role: str,
    expires_delta: Optional[timedelta] = None,
) -> str:
    now = datetime.now(timezone.utc)
    if expires_delta is None:
        expires_delta = timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    claims = {
        "sub": str(user_id),
        "email": email,
        "role": role,
        "iat": now,
        "exp": now + expires_delta,
    }
    return jwt.encode(claims, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def decode_access_token(token: str) -> TokenPayload:
    """Verify signature and expiry, returning the identity embedded at login."""
    try:
        claims = jwt.decode(
            token,
            settings.SECRET_KEY,
            algorithms=[settings.ALGORITHM],
            options={"require": ["sub", "exp"]},
        )
    except jwt.ExpiredSignatureError:
        raise TokenExpired()
    except jwt.InvalidTokenError:
        raise InvalidToken("Invalid token format.")

    try:
        return TokenPayload(
            user_id=int(claims["sub"]),
            email=claims.get("email", ""),
            role=claims.get("role", "user"),
            exp=int(claims["exp"]),
        )
    except (TypeError, ValueError):
        raise InvalidToken("Invalid token claims.")


def seconds_until_expiry(payload: TokenPayload) -> int:
    return payload.exp - int(datetime.now(timezone.utc).timestamp())


def needs_refresh(payload: TokenPayload) -> bool:
    return seconds_until_expiry(payload) < settings.TOKEN_REFRESH_THRESHOLD_SECONDS
