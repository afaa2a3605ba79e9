"""
pollhttp - HTTP for frame loops

Issue HTTP requests without blocking and collect the results by calling
Client.perform() once per frame. Three transports are available:

- multiplexed: libcurl multi interface (pycurl)
- threaded: one urllib3 worker thread per request
- host: aiohttp on an asyncio loop owned by the host application
"""

import logging

__version__ = "0.1.0"
__license__ = "MIT"

from pollhttp._client import (
    DEFAULT_TRANSPORT,
    DEFAULT_USER_AGENT,
    TRANSPORT_ENV_VAR,
    Client,
    ClientConfig,
)
from pollhttp._curl_transport import MultiplexedTransport
from pollhttp._exceptions import (
    ClientClosedError,
    FatalError,
    PollHTTPError,
    RequestStateError,
    URLParseError,
    panic,
)
from pollhttp._host_transport import HostManagedTransport
from pollhttp._request import Request, RequestState
from pollhttp._status import StatusCode, describe, is_sentinel
from pollhttp._threaded_transport import ThreadedTransport
from pollhttp._transport import TRANSPORTS, Transport, create_transport, failure_status
from pollhttp._url import DEFAULT_PORTS, Endpoint, parse, to_string

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    "Client",
    "ClientConfig",
    "Request",
    "RequestState",
    "Endpoint",
    "parse",
    "to_string",
    "DEFAULT_PORTS",
    "StatusCode",
    "describe",
    "is_sentinel",
    "Transport",
    "MultiplexedTransport",
    "ThreadedTransport",
    "HostManagedTransport",
    "TRANSPORTS",
    "create_transport",
    "failure_status",
    "PollHTTPError",
    "URLParseError",
    "RequestStateError",
    "ClientClosedError",
    "FatalError",
    "panic",
    "DEFAULT_USER_AGENT",
    "DEFAULT_TRANSPORT",
    "TRANSPORT_ENV_VAR",
]
