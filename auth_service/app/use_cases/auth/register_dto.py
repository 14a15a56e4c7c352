"""
Register Use Case DTOs (Data Transfer Objects)

Command/Response pattern for clean architecture separation:
- RegisterCommand: Input to use case (validated business intent)
- RegisterResponse: Output from use case (structured result)
"""

from typing import List, Optional

from pydantic import BaseModel


class RegisterCommand(BaseModel):
    """
    Register command - represents validated registration intent

    Created by API layer after request validation passes.
    """

    email: str
    password: str
    full_name: Optional[str] = None


class RegisterResponse(BaseModel):
    """Registered user (no credentials, the client logs in afterwards)"""

    id: str
    email: str
    full_name: Optional[str]
    roles: List[str]
