"""
Tenant session - the authenticated identity the ledger services act for.
"""
from dataclasses import dataclass
from typing import Optional

from churchledger.core.exceptions import Unauthenticated
from churchledger.models.church_membership import ChurchRole


@dataclass(frozen=True)
class TenantSession:
    """A principal acting inside one church."""
    church_id: str
    user_id: str
    role: ChurchRole = ChurchRole.VIEWER

    @property
    def can_write(self) -> bool:
        return self.role in (ChurchRole.OWNER, ChurchRole.ADMIN, ChurchRole.TREASURER)


def require_session(session: Optional[TenantSession]) -> TenantSession:
    """Return ``session`` or raise Unauthenticated when nobody is signed in."""
    if session is None or not session.user_id:
        raise Unauthenticated("No authenticated principal for this church")
    return session
