from sqlalchemy.ext.asyncio import AsyncSession
import logging

from estate_crm.core import security
from estate_crm.core.errors import AuthError
from estate_crm.crud import agent as crud_agent
from estate_crm.schemas.auth import LoginRequest, LoginResponse, SessionContext

logger = logging.getLogger(__name__)


class AuthServices:

    @staticmethod
    async def login_service(request: LoginRequest, db: AsyncSession) -> LoginResponse:
        """
        Exchange email + password for a bearer token and the session context.

        Unknown email and wrong password get the same message.
        """
        user = await crud_agent.get_user_by_email(db, request.email.strip())
        if not user or not security.verify_password(request.password, user.password_hash):
            raise AuthError("Invalid email or password", status_code=401)
        if not user.is_active:
            raise AuthError("User account is disabled", status_code=403)

        token, token_id = security.create_access_token(user.user_id)
        session = await security.load_session_context(db, user.user_id, token_id)
        logger.info("User %s signed in (role=%s)", user.user_id, session.role)
        return LoginResponse(access_token=token, session=session)

    @staticmethod
    async def logout_service(ctx: SessionContext, token: str, redis) -> None:
        """Tear down the session: the token id stays revoked until it expires."""
        payload = security.verify_token(token)
        await security.revoke_token(redis, ctx.token_id or payload.get("jti"), payload.get("exp"))
        logger.info("User %s signed out", ctx.user_id)
