"""
First-run administrator bootstrap.

`setupKey == "FIRST_RUN"` is allowed only while no admin role exists. Those calls
are serialised on a short Redis lock and the "does an admin exist" check runs
inside it, so two simultaneous first-run requests cannot both get through.
Any other key must equal the operator's ADMIN_SETUP_KEY.

The identity, agent profile and role are written in one transaction: a failure
at any step leaves no partial account behind.
"""
import hmac
import logging
from typing import Optional
from uuid import uuid4

from email_validator import validate_email, EmailNotValidError
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from estate_crm.core import config, security
from estate_crm.core.errors import AuthError, ValidationError
from estate_crm.crud import agent as crud_agent
from estate_crm.models import Agent, User
from estate_crm.schemas.admin_setup import CreateAdminRequest, CreateAdminResponse

logger = logging.getLogger(__name__)

FIRST_RUN_KEY = "FIRST_RUN"
BOOTSTRAP_LOCK_KEY = "lock:admin-bootstrap"
BOOTSTRAP_LOCK_SECONDS = 30
MIN_PASSWORD_LENGTH = 8


def validate_account_fields(email: Optional[str], password: Optional[str], name: Optional[str]) -> tuple[str, str, str]:
    if not email or not password or not name or not name.strip():
        raise ValidationError("email, password, name are required")
    if len(password) < MIN_PASSWORD_LENGTH:
        raise ValidationError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")
    try:
        normalized = validate_email(email.strip(), check_deliverability=False).normalized
    except EmailNotValidError as e:
        raise ValidationError(str(e))
    return normalized.lower(), password, name.strip()


async def create_staff_account(
    db: AsyncSession,
    email: str,
    password: str,
    name: str,
    role: str,
    phone: Optional[str] = None,
) -> tuple[User, Agent]:
    """Identity + agent profile + role as a single unit of work."""
    if await crud_agent.get_user_by_email(db, email):
        raise ValidationError("A user with this email address has already been registered")

    try:
        user = await crud_agent.create_user(db, email, security.hash_password(password))
        agent = await crud_agent.create_agent(db, user.user_id, name=name, email=email, phone=phone)
        await crud_agent.create_role(db, user.user_id, role)
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise ValidationError("A user with this email address has already been registered")
    except Exception:
        await db.rollback()
        raise

    return user, agent


def _setup_key_matches(setup_key: Optional[str]) -> bool:
    if not config.ADMIN_SETUP_KEY or not setup_key:
        return False
    return hmac.compare_digest(setup_key.encode(), config.ADMIN_SETUP_KEY.encode())


class AdminBootstrapService:

    @staticmethod
    async def create_admin_service(request: CreateAdminRequest, db: AsyncSession, redis) -> CreateAdminResponse:
        """
        Create an administrator account.

        Raises:
            AuthError (403): wrong setup key, an admin already exists on FIRST_RUN,
                or another first-run setup holds the lock.
            ValidationError (400): missing/invalid fields or duplicate email.
        """
        first_run = request.setup_key == FIRST_RUN_KEY
        if not first_run and not _setup_key_matches(request.setup_key):
            raise AuthError("Invalid setup key")

        if not first_run:
            email, password, name = validate_account_fields(request.email, request.password, request.name)
            user, agent = await create_staff_account(db, email, password, name, role="admin", phone=request.phone)
        else:
            lock_token = uuid4().hex
            acquired = await redis.set(BOOTSTRAP_LOCK_KEY, lock_token, nx=True, ex=BOOTSTRAP_LOCK_SECONDS)
            if not acquired:
                raise AuthError("Setup is already in progress. Please try again shortly.")
            try:
                if await crud_agent.admin_exists(db):
                    raise AuthError("Setup already complete. An admin account already exists, please log in.")
                email, password, name = validate_account_fields(request.email, request.password, request.name)
                user, agent = await create_staff_account(db, email, password, name, role="admin", phone=request.phone)
            finally:
                if await redis.get(BOOTSTRAP_LOCK_KEY) == lock_token:
                    await redis.delete(BOOTSTRAP_LOCK_KEY)

        logger.info("Admin account %s created (first_run=%s)", user.user_id, first_run)
        return CreateAdminResponse(
            success=True,
            message=f'Admin user "{name}" created successfully. You can now log in at /admin/login.',
            user_id=user.user_id,
            agent_id=agent.agent_id,
        )
