"""
Member directory helpers.

Lookups the ledger needs from the member registry, shared by the finance
and membership routers.
"""
from typing import Optional
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select

from churchledger.models.member import Member
from churchledger.models.tithe_record import TitheRecord
from churchledger.schemas.transaction import TitheRecordResponse
from churchledger.services.decoding import decode_tithe_record


async def get_member_by_id(
    db: AsyncSession,
    church_id: str,
    member_id: str
) -> Optional[Member]:
    """Return the church's member with ``member_id``, or None."""
    result = await db.execute(
        select(Member).where(
            Member.id == member_id,
            Member.church_id == church_id
        )
    )
    return result.scalar_one_or_none()


async def list_tithe_records(
    db: AsyncSession,
    church_id: str,
    member_id: str
) -> list[TitheRecordResponse]:
    """Return a member's tithe sub-ledger, newest first."""
    result = await db.execute(
        select(TitheRecord).where(
            TitheRecord.church_id == church_id,
            TitheRecord.member_id == member_id
        ).order_by(TitheRecord.occurred_at.desc())
    )
    return [decode_tithe_record(row) for row in result.scalars().all()]
