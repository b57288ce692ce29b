"""
Member endpoints for the ChurchLedger Membership module.
"""
import logging
from decimal import Decimal
from typing import Optional
from math import ceil
from fastapi import APIRouter, Depends, HTTPException, status, Query
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func

from churchledger.core.permissions import get_tenant_session, get_writer_session
from churchledger.core.tenancy import TenantSession
from churchledger.db.base import get_db
from churchledger.models.member import Member
from churchledger.schemas.member import (
    MemberCreate, MemberUpdate, MemberResponse, MemberListResponse
)
from churchledger.schemas.transaction import TitheRecordListResponse
from churchledger.services.decoding import decode_member
from churchledger.services.members import get_member_by_id, list_tithe_records

logger = logging.getLogger(__name__)

router = APIRouter()


async def _get_member_or_404(db: AsyncSession, church_id: str, member_id: str) -> Member:
    member = await get_member_by_id(db, church_id, member_id)
    if member is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Member not found"
        )
    return member


@router.get("/members", response_model=MemberListResponse)
async def list_members(
    page: int = Query(1, ge=1),
    perPage: int = Query(30, ge=1, le=500),
    is_tither: Optional[bool] = None,
    search: Optional[str] = None,
    session: TenantSession = Depends(get_tenant_session),
    db: AsyncSession = Depends(get_db)
):
    """
    List members of a church.
    ``is_tither=true`` lists the tithers only.
    """
    query = select(Member).where(Member.church_id == session.church_id)

    if is_tither is not None:
        query = query.where(Member.is_tither == is_tither)
    if search:
        query = query.where(Member.name.ilike(f"%{search}%"))

    count_query = select(func.count()).select_from(query.subquery())
    total_result = await db.execute(count_query)
    total_items = total_result.scalar() or 0

    query = query.order_by(Member.name.asc())
    query = query.offset((page - 1) * perPage).limit(perPage)

    result = await db.execute(query)
    items = [decode_member(m) for m in result.scalars().all()]

    return MemberListResponse(
        page=page,
        perPage=perPage,
        totalItems=total_items,
        totalPages=ceil(total_items / perPage) if total_items > 0 else 1,
        items=items
    )


@router.post("/members", response_model=MemberResponse, status_code=status.HTTP_201_CREATED)
async def create_member(
    member_data: MemberCreate,
    session: TenantSession = Depends(get_writer_session),
    db: AsyncSession = Depends(get_db)
):
    member = Member(church_id=session.church_id, **member_data.model_dump())
    db.add(member)
    await db.commit()
    await db.refresh(member)

    logger.info(f"Member {member.id} added to church {session.church_id}")
    return decode_member(member)


@router.get("/members/{member_id}", response_model=MemberResponse)
async def get_member(
    member_id: str,
    session: TenantSession = Depends(get_tenant_session),
    db: AsyncSession = Depends(get_db)
):
    return decode_member(await _get_member_or_404(db, session.church_id, member_id))


@router.patch("/members/{member_id}", response_model=MemberResponse)
async def update_member(
    member_id: str,
    member_data: MemberUpdate,
    session: TenantSession = Depends(get_writer_session),
    db: AsyncSession = Depends(get_db)
):
    """
    Update a member.
    Renaming does not touch the member name cached on past entries.
    """
    member = await _get_member_or_404(db, session.church_id, member_id)

    for field, value in member_data.model_dump(exclude_unset=True).items():
        if value is None and field in ("name", "is_tither", "is_baptized"):
            continue
        setattr(member, field, value)

    await db.commit()
    await db.refresh(member)
    return decode_member(member)


@router.delete("/members/{member_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_member(
    member_id: str,
    session: TenantSession = Depends(get_writer_session),
    db: AsyncSession = Depends(get_db)
):
    """
    Delete a member.
    Their tithe records and entries are kept.
    """
    member = await _get_member_or_404(db, session.church_id, member_id)
    await db.delete(member)
    await db.commit()

    logger.info(f"Member {member_id} removed from church {session.church_id}")
    return None


@router.get("/members/{member_id}/tithes", response_model=TitheRecordListResponse)
async def list_member_tithes(
    member_id: str,
    session: TenantSession = Depends(get_tenant_session),
    db: AsyncSession = Depends(get_db)
):
    """
    A member's tithe records, newest first.
    Records are listed even if the member no longer exists.
    """
    items = await list_tithe_records(db, session.church_id, member_id)
    return TitheRecordListResponse(
        totalItems=len(items),
        total_amount=sum((r.amount for r in items), Decimal("0")),
        items=items
    )
