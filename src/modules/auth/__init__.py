from src.modules.auth.models import RoleType, User
from src.modules.auth.router import router

__all__ = [
    "User",
    "RoleType",
    "router",
]
