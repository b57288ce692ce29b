"""
Church membership model - links users to churches with roles.
"""
from typing import Optional, TYPE_CHECKING
from datetime import datetime
from sqlalchemy import String, Boolean, ForeignKey, DateTime, Enum, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship
import enum
from churchledger.models.base import BaseModel

if TYPE_CHECKING:
    from churchledger.models.user import User
    from churchledger.models.church import Church


class ChurchRole(str, enum.Enum):
    """Roles a user can hold in a church."""
    OWNER = "owner"
    ADMIN = "admin"
    TREASURER = "treasurer"
    VIEWER = "viewer"


class ChurchMembership(BaseModel):
    """Grants a user access to one church's data."""
    __tablename__ = "church_memberships"
    __table_args__ = (
        UniqueConstraint("church_id", "user_id", name="uq_church_memberships_church_user"),
    )

    church_id: Mapped[str] = mapped_column(
        String(15),
        ForeignKey("churches.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    user_id: Mapped[str] = mapped_column(
        String(15),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    role: Mapped[ChurchRole] = mapped_column(
        Enum(ChurchRole, values_callable=lambda x: [e.value for e in x]),
        nullable=False,
        default=ChurchRole.VIEWER,
        index=True
    )
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    joined_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    church: Mapped["Church"] = relationship(
        "Church",
        back_populates="memberships"
    )
    user: Mapped["User"] = relationship(
        "User",
        foreign_keys=[user_id],
        back_populates="memberships"
    )

    def __repr__(self) -> str:
        return f"<ChurchMembership {self.user_id} in {self.church_id} as {self.role}>"
