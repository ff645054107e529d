"""
Kullanıcı Kimlik Doğrulama Endpoint'leri

Endpoint'ler:
- POST /api/v1/auth/login            - Email/şifre ile JWT al
- GET  /api/v1/auth/me               - Token'daki kullanıcı
- POST /api/v1/auth/change-password  - Şifre değiştir
- POST /api/v1/auth/users            - Kullanıcı oluştur (sadece admin)
"""
from fastapi import APIRouter, status

from src.modules.auth.dependencies import AuthServiceDep, CurrentAdmin, CurrentUser
from src.modules.auth.schemas import (
    ChangePasswordRequest,
    LoginRequest,
    MessageResponse,
    Token,
    UserCreate,
    UserResponse,
)

router = APIRouter(prefix="/auth", tags=["Auth"])


@router.post(
    "/login",
    response_model=Token,
    summary="Giriş",
    openapi_extra={"security": []},
)
async def login(data: LoginRequest, auth_service: AuthServiceDep) -> Token:
    """Email ve şifre ile giriş yap, Bearer token al."""
    return await auth_service.login(data)


@router.get("/me", response_model=UserResponse, summary="Kullanıcı Profili")
async def get_me(current_user: CurrentUser) -> UserResponse:
    return UserResponse.model_validate(current_user)


@router.post("/change-password", response_model=MessageResponse, summary="Şifre Değiştir")
async def change_password(
    data: ChangePasswordRequest,
    current_user: CurrentUser,
    auth_service: AuthServiceDep,
) -> MessageResponse:
    await auth_service.change_password(current_user, data)
    return MessageResponse(message="Password updated")


@router.post(
    "/users",
    response_model=UserResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Kullanıcı Oluştur",
)
async def create_user(
    data: UserCreate,
    admin: CurrentAdmin,
    auth_service: AuthServiceDep,
) -> UserResponse:
    """Yeni kullanıcı oluştur. Sadece `admin` rolü."""
    user = await auth_service.create_user(data)
    return UserResponse.model_validate(user)
