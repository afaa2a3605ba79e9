"""
Transport contract and registry.

A transport performs the actual network I/O for requests handed to it by a
Client. Each variant drives completion in its own way:

- multiplexed: one shared pycurl multi handle, advanced by step()
- threaded: one urllib3 worker thread per request
- host: coroutines scheduled on an asyncio loop owned by the host

Whatever the variant, every initiated request reaches Request._complete()
exactly once, with a sentinel status when the transfer fails.
"""

from abc import ABC, abstractmethod

from pollhttp._exceptions import panic
from pollhttp._status import StatusCode

TRANSPORTS = {}


def register(cls):
    """Class decorator adding a transport to the name registry"""
    TRANSPORTS[cls.name] = cls
    return cls


def create_transport(name, **options):
    """Instantiate a registered transport by name"""
    try:
        cls = TRANSPORTS[name]
    except KeyError:
        known = ", ".join(sorted(TRANSPORTS))
        raise ValueError(f"unknown transport {name!r} (expected one of: {known})") from None
    return cls(**options)


def failure_status(exc):
    """Map a transport exception to a sentinel status"""
    seen = set()
    while exc is not None and id(exc) not in seen:
        if isinstance(exc, PermissionError):
            return StatusCode.BLOCKED
        seen.add(id(exc))
        exc = exc.__cause__ or exc.__context__
    return StatusCode.CONNECTION_FAILED


class Transport(ABC):
    """Backend that moves requests from initiation to completion"""

    name = None

    def __init__(self):
        self.config = None

    def __repr__(self):
        return f"<{type(self).__name__} {self.name}>"

    def bind(self, config):
        """Attach the owning client's configuration"""
        self.config = config

    @property
    def user_agent(self):
        return self.config.user_agent if self.config else None

    @property
    def proxy(self):
        """SOCKS5 proxy URL, or None"""
        if self.config is None or not self.config.socks5:
            return None
        return f"socks5h://{self.config.socks5}"

    def reject_proxy(self):
        if self.proxy is not None:
            panic(f"socks5 unsupported with {self.name} transport", backend=type(self).__name__)

    @abstractmethod
    def initiate(self, request):
        """Start work for request without blocking the caller"""

    def step(self):
        """Advance owned transfers by one non-blocking unit of work"""

    def release(self, request):
        """Free backend resources once the client consumed the completion"""

    def close(self):
        """Release everything the transport still holds"""
