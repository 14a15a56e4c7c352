"""
User Session Use Cases

Identity and session management for the current user.
"""

from .load_context_use_case import LoadContextUseCase
from .list_sessions_use_case import ListSessionsUseCase
from .revoke_sessions_use_case import RevokeSessionsUseCase
from .dtos import (
    CurrentIdentityResponse,
    RevokeSessionResponse,
    RevokeSessionsResponse,
    SessionListResponse,
    SessionSummary,
)

__all__ = [
    "LoadContextUseCase",
    "ListSessionsUseCase",
    "RevokeSessionsUseCase",
    "CurrentIdentityResponse",
    "RevokeSessionResponse",
    "RevokeSessionsResponse",
    "SessionListResponse",
    "SessionSummary",
]
