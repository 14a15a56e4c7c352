"""
User Use Case DTOs

Response shapes for identity and session enumeration.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel


class CurrentIdentityResponse(BaseModel):
    """Profile of the subject behind a valid access credential"""

    id: str
    email: str
    full_name: Optional[str]
    roles: List[str]
    status: str
    session_id: str


class SessionSummary(BaseModel):
    """Session as shown to its owner, credential digests never included"""

    id: str
    device_info: Optional[str]
    ip_address: Optional[str]
    user_agent: Optional[str]
    session_type: str
    created_at: datetime
    last_accessed_at: datetime
    access_expires_at: datetime
    refresh_expires_at: datetime
    current: bool


class SessionListResponse(BaseModel):
    sessions: List[SessionSummary]
    active_count: int


class RevokeSessionsResponse(BaseModel):
    revoked_count: int


class RevokeSessionResponse(BaseModel):
    session_id: str
    revoked: bool
