from sqlalchemy import Column, Integer, String, Boolean, DateTime, Enum
from sqlalchemy.sql import func
import enum

from .base import Base


class UserRole(str, enum.Enum):
    """Lab user role enumeration"""
    SUPERADMIN = "superadmin"
    ADMIN = "admin"
    LEAD_INSTRUCTOR = "lead_instructor"
    INSTRUCTOR = "instructor"
    GUEST = "guest"

    @property
    def level(self) -> int:
        return ROLE_LEVELS[self]


ROLE_LEVELS = {
    UserRole.SUPERADMIN: 5,
    UserRole.ADMIN: 4,
    UserRole.LEAD_INSTRUCTOR: 3,
    UserRole.INSTRUCTOR: 2,
    UserRole.GUEST: 1,
}


def has_min_role(role, required: UserRole) -> bool:
    """True when role is at or above the required level; unknown roles rank lowest."""
    try:
        level = UserRole(role).level
    except ValueError:
        return False
    return level >= required.level


class User(Base):
    """Staff account for the lab management tools"""
    __tablename__ = "lab_users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String(255), unique=True, nullable=False, index=True)
    password_hash = Column(String(255), nullable=False)
    name = Column(String(255), nullable=True)
    role = Column(Enum(UserRole), nullable=False, default=UserRole.GUEST)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
