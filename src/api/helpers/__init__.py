"""API helper utilities."""
from api.helpers.errors import SERVICE_ERRORS, to_http_exception
from api.helpers.viewer import viewer_identity

__all__ = [
    "SERVICE_ERRORS",
    "to_http_exception",
    "viewer_identity",
]
