"""
Auth Service Domain Enums

All enumeration types used across domain entities.
"""

from enum import Enum


class UserStatus(str, Enum):
    """User account status"""

    active = "active"
    disabled = "disabled"


class SessionType(str, Enum):
    """Informational classification of a session"""

    web = "WEB"
    mobile = "MOBILE"


class DeviceType(str, Enum):
    """Coarse device category derived from the user agent"""

    mobile = "MOBILE"
    tablet = "TABLET"
    desktop = "DESKTOP"
    unknown = "UNKNOWN"
