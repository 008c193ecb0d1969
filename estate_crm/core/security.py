"""
Security & Authentication

Password hashing, JWT access tokens and the per-request SessionContext.
"""
from datetime import datetime, timedelta, timezone
from typing import Optional
from uuid import UUID, uuid4

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import JWTError, jwt
from passlib.context import CryptContext
from sqlalchemy.ext.asyncio import AsyncSession

from estate_crm.core import config
from estate_crm.core.errors import AuthError
from estate_crm.crud import agent as crud_agent
from estate_crm.db.session import get_db
from estate_crm.db.redis_client import get_redis
from estate_crm.schemas.auth import SessionContext

# Password hashing
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

# JWT Bearer token; missing header is handled below so it maps to 401
security = HTTPBearer(auto_error=False)

REVOKED_TOKEN_KEY = "auth:revoked:{}"


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a password against its hash"""
    return pwd_context.verify(plain_password, hashed_password)


def hash_password(password: str) -> str:
    """Hash a password"""
    return pwd_context.hash(password)


def create_access_token(user_id: UUID, expires_delta: Optional[timedelta] = None) -> tuple[str, str]:
    """
    Create a JWT access token for a user.

    Returns:
        (encoded token, token id). The token id (`jti`) is what logout revokes.
    """
    now = datetime.now(timezone.utc)
    expire = now + (expires_delta or timedelta(minutes=config.ACCESS_TOKEN_EXPIRE_MINUTES))
    token_id = uuid4().hex

    to_encode = {"sub": str(user_id), "jti": token_id, "iat": now, "exp": expire}
    encoded_jwt = jwt.encode(to_encode, config.JWT_SECRET_KEY, algorithm=config.JWT_ALGORITHM)
    return encoded_jwt, token_id


def verify_token(token: str) -> dict:
    """
    Verify and decode a JWT token

    Raises:
        AuthError: If token is invalid or expired
    """
    try:
        return jwt.decode(token, config.JWT_SECRET_KEY, algorithms=[config.JWT_ALGORITHM])
    except JWTError as e:
        raise AuthError(f"Invalid token: {e}", status_code=401)


async def load_session_context(db: AsyncSession, user_id: UUID, token_id: Optional[str] = None) -> SessionContext:
    """Build the session context: identity plus role and agent profile lookups."""
    user = await crud_agent.get_user_by_id(db, user_id)
    if not user or not user.is_active:
        raise AuthError("User not found or disabled", status_code=401)

    role = await crud_agent.get_role_for_user(db, user.user_id)
    agent = await crud_agent.get_agent_for_user(db, user.user_id)

    return SessionContext(
        user_id=user.user_id,
        email=user.email,
        agent_id=agent.agent_id if agent else None,
        agent_name=agent.name if agent else user.email,
        role=role,
        token_id=token_id,
    )


async def revoke_token(redis, token_id: str, expires_at: Optional[int] = None) -> None:
    """Deny-list a token id until the token would have expired anyway."""
    ttl = config.ACCESS_TOKEN_EXPIRE_MINUTES * 60
    if expires_at:
        ttl = max(int(expires_at - datetime.now(timezone.utc).timestamp()), 1)
    await redis.set(REVOKED_TOKEN_KEY.format(token_id), "1", ex=ttl)


def agent_scope(ctx: SessionContext) -> Optional[UUID]:
    """
    Row-level scope for lead queries: admins see everything (None),
    agents only leads assigned to their own profile.
    """
    if ctx.is_admin:
        return None
    if ctx.agent_id is None:
        raise AuthError("No agent profile is linked to this account")
    return ctx.agent_id


async def get_session_context(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: AsyncSession = Depends(get_db),
    redis=Depends(get_redis),
) -> SessionContext:
    """
    Dependency to get the current authenticated caller

    Usage:
        @router.get("/me")
        async def me(ctx: SessionContext = Depends(get_session_context)):
            return ctx
    """
    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )

    try:
        payload = verify_token(credentials.credentials)
        token_id = payload.get("jti")
        if token_id and await redis.get(REVOKED_TOKEN_KEY.format(token_id)):
            raise AuthError("Session has ended, please sign in again", status_code=401)
        try:
            user_id = UUID(str(payload.get("sub")))
        except ValueError:
            raise AuthError("Invalid token payload", status_code=401)
        return await load_session_context(db, user_id, token_id)
    except AuthError as e:
        raise HTTPException(
            status_code=e.status_code,
            detail=str(e),
            headers={"WWW-Authenticate": "Bearer"},
        )


async def require_staff(ctx: SessionContext = Depends(get_session_context)) -> SessionContext:
    """Any account holding a role (admin or agent)."""
    if not ctx.is_staff:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="No role assigned to this account")
    return ctx


async def require_admin(ctx: SessionContext = Depends(get_session_context)) -> SessionContext:
    if not ctx.is_admin:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Admin role required")
    return ctx
