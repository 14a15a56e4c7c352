"""
Request Context

Client address and device category captured when a session is created.
"""

from typing import Optional

from fastapi import Request

from auth_service.domain.entities import DeviceType


def _usable(value: Optional[str]) -> bool:
    return bool(value) and value.lower() != "unknown"


def get_client_ip(request: Request) -> Optional[str]:
    """First hop of X-Forwarded-For, then X-Real-IP, then the socket peer"""
    forwarded_for = request.headers.get("X-Forwarded-For")
    if _usable(forwarded_for):
        return forwarded_for.split(",")[0].strip()

    real_ip = request.headers.get("X-Real-IP")
    if _usable(real_ip):
        return real_ip.strip()

    return request.client.host if request.client else None


def classify_device(user_agent: Optional[str]) -> str:
    """Substring heuristic on the user agent"""
    if not user_agent:
        return DeviceType.unknown.value
    if "Mobile" in user_agent:
        return DeviceType.mobile.value
    if "Tablet" in user_agent:
        return DeviceType.tablet.value
    return DeviceType.desktop.value
