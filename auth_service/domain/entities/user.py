"""
User Entity

Represents a person who can log in and own sessions.
"""

from datetime import datetime
from typing import List, Optional
from uuid import UUID, uuid4

from sqlmodel import JSON, Column, DateTime, Field, SQLModel

from ..base import utc_now
from .enums import UserStatus


class User(SQLModel, table=True):
    """
    User entity - the subject that owns sessions.

    Business Rules:
    - Email must be unique across all users
    - Password stored as bcrypt hash (cost factor 12)
    - Role names are embedded in access credentials and re-read on refresh
    """

    __tablename__ = "users"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    email: str = Field(unique=True, index=True, max_length=255)
    password_hash: str = Field(max_length=60)  # Bcrypt output is 60 chars
    full_name: Optional[str] = Field(default=None, max_length=255)

    roles: List[str] = Field(default_factory=lambda: ["USER"], sa_column=Column(JSON))
    status: UserStatus = Field(default=UserStatus.active)

    # Timestamps
    created_at: datetime = Field(default_factory=utc_now, sa_column=Column(DateTime))
    last_login_at: Optional[datetime] = Field(default=None, sa_column=Column(DateTime))
