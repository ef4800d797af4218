"""
User model with secure password storage and a marketplace role.
"""

from sqlalchemy import Column, Integer, String, Boolean, CheckConstraint
from sqlalchemy.orm import relationship

from app.db.base import Base, TimestampMixin
from app.domain.enums import UserRole, sql_values


class User(Base, TimestampMixin):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String(255), unique=True, index=True, nullable=False)
    username = Column(String(100), unique=True, index=True, nullable=False)
    hashed_password = Column(String(255), nullable=False)
    role = Column(String(20), nullable=False, default=UserRole.CLIENT.value)
    is_active = Column(Boolean, default=True, nullable=False)

    spaces = relationship("Space", back_populates="owner")

    __table_args__ = (
        CheckConstraint(f"role IN ({sql_values(UserRole)})", name="check_user_role"),
    )

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email={self.email}, role={self.role})>"
