"""
Auth Module - Service
Back-office users: login, profile, password change and admin-side creation.
"""
import uuid
from datetime import datetime, timezone

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.database import unit_of_work
from src.core.exceptions import ConflictError, UnauthorizedError, ValidationError
from src.core.logging import get_logger
from src.core.security import create_access_token, get_password_hash, verify_password
from src.modules.auth.models import RoleType, User
from src.modules.auth.schemas import ChangePasswordRequest, LoginRequest, Token, UserCreate

logger = get_logger(__name__)


class AuthService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_user_by_id(self, user_id: uuid.UUID) -> User | None:
        return await self.db.get(User, user_id)

    async def get_user_by_email(self, email: str) -> User | None:
        """Emails are stored lower-cased; lookup is case-insensitive."""
        result = await self.db.execute(select(User).where(User.email == email.lower()))
        return result.scalar_one_or_none()

    async def login(self, request: LoginRequest) -> Token:
        user = await self.get_user_by_email(request.email)
        # Same message for unknown email and wrong password
        if user is None or not verify_password(request.password, user.hashed_password):
            logger.warning("Login failed", email=request.email.lower())
            raise UnauthorizedError("Invalid email or password")
        if not user.is_active:
            raise UnauthorizedError("User account is disabled")

        async with unit_of_work(self.db):
            user.last_login = datetime.now(timezone.utc)

        logger.info("User logged in", user_id=str(user.id), role=user.role)
        return Token(
            access_token=create_access_token(subject=str(user.id), extra_claims={"role": user.role})
        )

    async def create_user(self, data: UserCreate) -> User:
        email = data.email.lower()
        if await self.get_user_by_email(email):
            raise ConflictError(f"User with email '{email}' already exists")

        user = User(
            email=email,
            hashed_password=get_password_hash(data.password),
            full_name=data.full_name,
            role=data.role.value,
        )
        try:
            async with unit_of_work(self.db):
                self.db.add(user)
                await self.db.flush()
        except IntegrityError as e:
            raise ConflictError(f"User with email '{email}' already exists") from e
        await self.db.refresh(user)

        logger.info("User created", user_id=str(user.id), role=user.role)
        return user

    async def change_password(self, user: User, request: ChangePasswordRequest) -> None:
        if not verify_password(request.current_password, user.hashed_password):
            raise ValidationError("Current password is incorrect")

        async with unit_of_work(self.db):
            user.hashed_password = get_password_hash(request.new_password)
        logger.info("Password changed", user_id=str(user.id))

    async def ensure_superuser(self, email: str, password: str) -> User:
        """Startup hook: create the first admin unless the email already exists."""
        existing = await self.get_user_by_email(email)
        if existing:
            return existing
        return await self.create_user(
            UserCreate(email=email, password=password, full_name="Administrator", role=RoleType.ADMIN)
        )
