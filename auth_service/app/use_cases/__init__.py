"""
Use Cases

Organized into domain folders:
- auth/: Registration, login, refresh, logout
- users/: Current identity and session management
"""

from .auth import (
    RegisterUseCase,
    LoginUseCase,
    RefreshTokenUseCase,
    LogoutUseCase,
)
from .users import (
    LoadContextUseCase,
    ListSessionsUseCase,
    RevokeSessionsUseCase,
)

__all__ = [
    # Auth
    "RegisterUseCase",
    "LoginUseCase",
    "RefreshTokenUseCase",
    "LogoutUseCase",
    # Users
    "LoadContextUseCase",
    "ListSessionsUseCase",
    "RevokeSessionsUseCase",
]
