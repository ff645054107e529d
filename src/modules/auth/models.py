"""
Auth Module - Database Models
Back-office users with a single role each.
"""
from datetime import datetime
from enum import Enum

from sqlalchemy import Boolean, DateTime, String
from sqlalchemy.orm import Mapped, mapped_column

from src.core.models import Base


class RoleType(str, Enum):
    """
    Role hierarchy.

    1. admin - user management and every EDAS operation
    2. manager - may delete notifications
    3. user - day-to-day notification and document work
    """
    ADMIN = "admin"
    MANAGER = "manager"
    USER = "user"


class User(Base):
    """Back-office user authenticated with email/password and JWT."""
    __tablename__ = "user"

    email: Mapped[str] = mapped_column(
        String(255),
        unique=True,
        index=True,
        nullable=False,
    )
    hashed_password: Mapped[str] = mapped_column(String(255), nullable=False)
    full_name: Mapped[str | None] = mapped_column(String(255), nullable=True)

    role: Mapped[str] = mapped_column(
        String(20),
        default=RoleType.USER.value,
        nullable=False,
        comment="admin/manager/user",
    )

    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    last_login: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    @property
    def is_admin(self) -> bool:
        return self.role == RoleType.ADMIN.value

    def __repr__(self) -> str:
        return f"<User {self.email} ({self.role})>"
