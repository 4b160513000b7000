"""Viewer identity for view deduplication."""
from fastapi import Request

from models.user import User
from services.view_tracker import ANONYMOUS_VIEWER


def viewer_identity(request: Request, user: User | None) -> str:
    """
    Identify the viewer of a request.

    Authenticated users are identified by id. Anonymous viewers fall back to the
    first X-Forwarded-For address, then X-Real-IP, then the socket peer.
    """
    if user is not None:
        return str(user.id)

    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        first = forwarded.split(",")[0].strip()
        if first:
            return first

    real_ip = request.headers.get("x-real-ip")
    if real_ip and real_ip.strip():
        return real_ip.strip()

    if request.client and request.client.host:
        return request.client.host
    return ANONYMOUS_VIEWER
