"""
Space model: a rentable venue listed by an owner.

The booking core reads spaces through the catalog lookup only; it never
mutates them. Price is a policy pair (amount, unit).
"""

from sqlalchemy import (
    Boolean, CheckConstraint, Column, ForeignKey, Index, Integer, Numeric, String,
)
from sqlalchemy.orm import relationship

from app.db.base import Base, TimestampMixin
from app.domain.enums import PriceUnit, sql_values
from app.domain.pricing import PricePolicy


class Space(Base, TimestampMixin):
    __tablename__ = "spaces"

    id = Column(Integer, primary_key=True, index=True)
    owner_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    name = Column(String(100), nullable=False)
    description = Column(String(1000), nullable=True)
    address = Column(String(255), nullable=True)
    capacity = Column(Integer, nullable=True)
    price_amount = Column(Numeric(12, 2), nullable=False)
    price_unit = Column(String(10), nullable=False)
    is_active = Column(Boolean, nullable=False, default=True)

    owner = relationship("User", back_populates="spaces")

    __table_args__ = (
        CheckConstraint("price_amount >= 0", name="check_space_price_non_negative"),
        CheckConstraint(f"price_unit IN ({sql_values(PriceUnit)})", name="check_space_price_unit"),
        # Listing query: active spaces, newest first
        Index("ix_spaces_active_created", "is_active", "created_at"),
    )

    @property
    def price(self) -> PricePolicy:
        return PricePolicy(amount=self.price_amount, unit=PriceUnit(self.price_unit))

    def __repr__(self) -> str:
        return f"<Space(id={self.id}, name={self.name}, owner={self.owner_id}, active={self.is_active})>"
