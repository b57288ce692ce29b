"""
Church model - the tenant every ledger row belongs to.
"""
from typing import Optional, TYPE_CHECKING
from sqlalchemy import String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship
from churchledger.core.config import settings
from churchledger.models.base import BaseModel

if TYPE_CHECKING:
    from churchledger.models.church_membership import ChurchMembership
    from churchledger.models.member import Member


class Church(BaseModel):
    """Church (tenant) model."""
    __tablename__ = "churches"

    name: Mapped[str] = mapped_column(String(200), nullable=False, index=True)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    currency: Mapped[str] = mapped_column(String(3), default=settings.DEFAULT_CURRENCY, nullable=False)

    memberships: Mapped[list["ChurchMembership"]] = relationship(
        "ChurchMembership",
        back_populates="church",
        cascade="all, delete-orphan"
    )
    members: Mapped[list["Member"]] = relationship(
        "Member",
        back_populates="church",
        cascade="all, delete-orphan"
    )

    def __repr__(self) -> str:
        return f"<Church {self.name}>"
