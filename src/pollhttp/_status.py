"""
Status codes reported by Request.status()
"""

from enum import IntEnum
from http import HTTPStatus


class StatusCode(IntEnum):
    """Reserved internal statuses, distinct from any protocol status"""

    CONNECTION_FAILED = 0
    BLOCKED = 1


def is_sentinel(status):
    """Return True if status is one of the reserved internal codes"""
    return status in (StatusCode.CONNECTION_FAILED, StatusCode.BLOCKED)


def describe(status):
    """Human readable name for a status code"""
    if is_sentinel(status):
        return StatusCode(status).name.replace("_", " ").title()
    try:
        return HTTPStatus(status).phrase
    except ValueError:
        return "Unknown"
