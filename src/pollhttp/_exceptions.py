"""
Exception hierarchy for pollhttp
"""

import logging

logger = logging.getLogger(__name__)


class PollHTTPError(Exception):
    """Base class for errors raised to callers of pollhttp"""


class URLParseError(PollHTTPError, ValueError):
    """Raised when a URL cannot be parsed into an Endpoint"""

    def __init__(self, message, url=None):
        super().__init__(message)
        self.url = url


class RequestStateError(PollHTTPError, RuntimeError):
    """Raised on an illegal request lifecycle transition"""


class ClientClosedError(PollHTTPError):
    """Raised when adding a request to a closed client"""


class FatalError(SystemExit):
    """A broken transport/client binding.

    Subclasses SystemExit so that an uncaught panic terminates the
    interpreter with the diagnostic as exit message, and so that a host
    loop's ``except Exception`` cannot swallow it.
    """

    def __init__(self, message):
        super().__init__(message)
        self.message = message

    def __str__(self):
        return self.message


def panic(message, backend=None):
    """Log a fatal integration error and raise FatalError"""
    if backend:
        message = f"{backend} unexpected condition: {message}"
    logger.critical(message)
    raise FatalError(message)
