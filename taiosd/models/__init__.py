"""API models for taiosd daemon.

This module defines request and response models for the REST API.
"""

from .errors import ErrorResponse
from .requests import PublishEventRequest
from .responses import PublishEventResponse
from .responses import StatusResponse

__all__ = [
    "ErrorResponse",
    "PublishEventRequest",
    "PublishEventResponse",
    "StatusResponse",
]
