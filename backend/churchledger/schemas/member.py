"""
Pydantic schemas for Member endpoints.
"""
from typing import Optional
from datetime import datetime, date
from pydantic import BaseModel, Field


class MemberCreate(BaseModel):
    """Create a new member."""
    name: str = Field(..., min_length=1, max_length=200)
    phone: Optional[str] = Field(None, max_length=50)
    birth_date: Optional[date] = None
    role: Optional[str] = Field(None, max_length=100)
    profession: Optional[str] = Field(None, max_length=100)
    marital_status: Optional[str] = Field(None, max_length=50)
    gender: Optional[str] = Field(None, max_length=50)
    is_tither: bool = False
    is_baptized: bool = False
    notes: Optional[str] = None


class MemberUpdate(BaseModel):
    """Update a member."""
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    phone: Optional[str] = Field(None, max_length=50)
    birth_date: Optional[date] = None
    role: Optional[str] = Field(None, max_length=100)
    profession: Optional[str] = Field(None, max_length=100)
    marital_status: Optional[str] = Field(None, max_length=50)
    gender: Optional[str] = Field(None, max_length=50)
    is_tither: Optional[bool] = None
    is_baptized: Optional[bool] = None
    notes: Optional[str] = None


class MemberResponse(BaseModel):
    """Member response."""
    id: str
    church_id: str
    name: str
    phone: Optional[str] = None
    birth_date: Optional[date] = None
    role: Optional[str] = None
    profession: Optional[str] = None
    marital_status: Optional[str] = None
    gender: Optional[str] = None
    is_tither: bool = False
    is_baptized: bool = False
    notes: Optional[str] = None
    created: datetime
    updated: datetime

    class Config:
        from_attributes = True


class MemberListResponse(BaseModel):
    """Paginated list of members."""
    page: int
    perPage: int
    totalItems: int
    totalPages: int
    items: list[MemberResponse]
