"""
Membership module - church member registry.

This module handles:
- Members (tithing and baptism flags, demographic fields)
- Per-member tithe records (read-only; written by the finance module)
"""
from fastapi import APIRouter

from churchledger.api.v1.membership.members import router as members_router

membership_router = APIRouter(prefix="/membership", tags=["membership"])

# Routes will be: /api/v1/membership/members
membership_router.include_router(members_router)

__all__ = [
    "membership_router",
]
