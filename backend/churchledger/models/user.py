"""
User model.
"""
from typing import TYPE_CHECKING
from sqlalchemy import String, Boolean
from sqlalchemy.orm import Mapped, mapped_column, relationship
from churchledger.models.base import BaseModel

if TYPE_CHECKING:
    from churchledger.models.church_membership import ChurchMembership


class User(BaseModel):
    """
    Principal that signs in to the dashboard.

    Credentials live with the external identity provider; only the identity
    the access token refers to is stored here.
    """
    __tablename__ = "users"

    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False, index=True)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)

    memberships: Mapped[list["ChurchMembership"]] = relationship(
        "ChurchMembership",
        foreign_keys="ChurchMembership.user_id",
        back_populates="user",
        cascade="all, delete-orphan"
    )

    def __repr__(self) -> str:
        return f"<User {self.email}>"
