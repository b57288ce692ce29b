"""
SQLAlchemy models for ChurchLedger.

- Tenancy: users, churches, church memberships
- Membership: members
- Finance: transactions, tithe records
"""
from churchledger.models.user import User
from churchledger.models.church import Church
from churchledger.models.church_membership import ChurchMembership, ChurchRole

from churchledger.models.member import Member

from churchledger.models.transaction import Transaction, TransactionKind
from churchledger.models.tithe_record import TitheRecord

__all__ = [
    # Tenancy
    "User",
    "Church",
    "ChurchMembership",
    "ChurchRole",
    # Membership
    "Member",
    # Finance
    "Transaction",
    "TransactionKind",
    "TitheRecord",
]
