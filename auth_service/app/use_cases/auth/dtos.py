"""
Authentication Use Case DTOs (Data Transfer Objects)

All Command and Response classes for auth domain.
Provides type safety and clear contracts between layers.
"""

from typing import Optional

from pydantic import BaseModel


# ============================================================================
# Command DTOs
# ============================================================================


class LoginCommand(BaseModel):
    """Login intent plus the request context captured by the API layer"""

    email: str
    password: str
    device_info: Optional[str] = None
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None


# ============================================================================
# Response DTOs
# ============================================================================


class TokenResponse(BaseModel):
    """Credential pair handed to the client on login and refresh"""

    access_token: str
    refresh_token: str
    token_type: str = "Bearer"
    expires_in: int
    refresh_expires_in: int
    session_id: str


class LoginResponse(TokenResponse):
    """Response for user login use case"""


class RefreshTokenResponse(TokenResponse):
    """Response for refresh token use case (refresh_token is returned unchanged)"""


class LogoutResponse(BaseModel):
    """Response for logout use case"""

    session_id: str
    revoked: bool
