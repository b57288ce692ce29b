"""
Member model for the church's member registry.

Members are people in the congregation; they are separate from users, who
are the principals allowed to operate the dashboard.
"""
from typing import Optional, TYPE_CHECKING
from datetime import date
from sqlalchemy import String, Text, ForeignKey, Boolean, Date
from sqlalchemy.orm import Mapped, mapped_column, relationship
from churchledger.models.base import BaseModel

if TYPE_CHECKING:
    from churchledger.models.church import Church


class Member(BaseModel):
    """
    Church member model.

    Tithe records for a member live in ``tithe_records`` keyed by
    ``member_id``; they are driven by the transaction store, so deleting a
    member leaves them in place.
    """
    __tablename__ = "members"

    church_id: Mapped[str] = mapped_column(
        String(15),
        ForeignKey("churches.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )

    name: Mapped[str] = mapped_column(String(200), nullable=False)
    phone: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    birth_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)

    # Ministry role (pastor, deacon, ...)
    role: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    profession: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    marital_status: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    gender: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)

    # Flags
    is_tither: Mapped[bool] = mapped_column(Boolean, default=False, index=True)
    is_baptized: Mapped[bool] = mapped_column(Boolean, default=False)

    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    church: Mapped["Church"] = relationship(
        "Church",
        foreign_keys=[church_id],
        back_populates="members"
    )

    def __repr__(self) -> str:
        return f"<Member {self.name}>"
