"""
Auth Module - FastAPI Dependencies

JWT (HS256, JWT_SECRET) Bearer token doğrulaması.
Token'daki sub (user id) ile veritabanından kullanıcı bulunur.
"""
import uuid
from typing import Annotated

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from src.core.database import AsyncSessionDep
from src.core.exceptions import ForbiddenError, UnauthorizedError
from src.core.logging import bind_context, get_logger
from src.core.security import TokenError, decode_token
from src.core.sentry import set_user
from src.modules.auth.models import User
from src.modules.auth.schemas import TokenPayload
from src.modules.auth.service import AuthService

logger = get_logger(__name__)

# Security scheme
security = HTTPBearer(auto_error=False)


async def get_auth_service(db: AsyncSessionDep) -> AuthService:
    """Get AuthService instance with injected database session."""
    return AuthService(db)


async def get_current_user(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
    auth_service: Annotated[AuthService, Depends(get_auth_service)],
) -> User:
    """
    Get current authenticated user from the Bearer token.

    Raises:
        UnauthorizedError: token missing, invalid, expired or user unknown
        ForbiddenError: user account disabled
    """
    if not credentials:
        raise UnauthorizedError("Authentication required")

    try:
        claims = TokenPayload.model_validate(decode_token(credentials.credentials))
        user_id = uuid.UUID(claims.sub)
    except TokenError as e:
        logger.warning("Token verification failed", reason=str(e), expired=e.expired)
        raise UnauthorizedError(str(e))
    except ValueError:
        # pydantic ValidationError is a ValueError too
        raise UnauthorizedError("Invalid token claims")

    user = await auth_service.get_user_by_id(user_id)
    if not user:
        logger.warning("Token subject not found", user_id=str(user_id))
        raise UnauthorizedError("User not found")

    if not user.is_active:
        raise ForbiddenError("User account is disabled")

    bind_context(user_id=str(user.id))
    set_user(str(user.id), user.email)
    return user


def require_role(roles: list[str]):
    """
    Dependency factory for role-based access control.
    Admins pass every role check.

    Usage:
        @router.delete("/x", dependencies=[Depends(require_role(["manager"]))])
    """
    async def role_checker(
        current_user: Annotated[User, Depends(get_current_user)],
    ) -> User:
        if current_user.is_admin or current_user.role in roles:
            return current_user
        raise ForbiddenError(f"Required role: {', '.join(roles)}")

    return role_checker


# Type aliases for dependency injection
CurrentUser = Annotated[User, Depends(get_current_user)]
CurrentAdmin = Annotated[User, Depends(require_role(["admin"]))]
AuthServiceDep = Annotated[AuthService, Depends(get_auth_service)]
