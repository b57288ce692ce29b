"""Role helpers for church-scoped resources."""
from fastapi import Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select

from churchledger.core.deps import get_current_user
from churchledger.core.tenancy import TenantSession
from churchledger.db.base import get_db
from churchledger.models.church import Church
from churchledger.models.church_membership import ChurchMembership
from churchledger.models.user import User


async def get_membership(db: AsyncSession, user_id: str, church_id: str):
    result = await db.execute(
        select(ChurchMembership).where(
            ChurchMembership.user_id == user_id,
            ChurchMembership.church_id == church_id,
            ChurchMembership.is_active == True
        )
    )
    return result.scalar_one_or_none()


async def ensure_church_exists(db: AsyncSession, church_id: str) -> Church:
    result = await db.execute(select(Church).where(Church.id == church_id))
    church = result.scalar_one_or_none()
    if church is None:
        raise HTTPException(status_code=404, detail="Church not found")
    return church


async def get_tenant_session(
    church_id: str,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
) -> TenantSession:
    """Resolve the caller's session in ``church_id``. Raises 403 for non-members."""
    await ensure_church_exists(db, church_id)
    membership = await get_membership(db, current_user.id, church_id)
    if membership is None:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Not authorized to access this church"
        )
    return TenantSession(church_id=church_id, user_id=current_user.id, role=membership.role)


async def get_writer_session(
    session: TenantSession = Depends(get_tenant_session)
) -> TenantSession:
    """Like get_tenant_session, but viewers are rejected."""
    if not session.can_write:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Insufficient role"
        )
    return session
