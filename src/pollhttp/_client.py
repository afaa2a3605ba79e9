"""
Client: owns pending requests and drains completions once per tick
"""

import logging
import os
from dataclasses import dataclass
from typing import Optional

from pollhttp._exceptions import ClientClosedError
from pollhttp._transport import Transport, create_transport

logger = logging.getLogger(__name__)

DEFAULT_USER_AGENT = "pollhttp 0.1"
DEFAULT_TRANSPORT = "multiplexed"
TRANSPORT_ENV_VAR = "POLLHTTP_TRANSPORT"


@dataclass(frozen=True)
class ClientConfig:
    """Settings a client passes to its transport"""

    user_agent: str = DEFAULT_USER_AGENT
    socks5: Optional[str] = None


def _validate_socks5(address):
    host, sep, port = address.rpartition(":")
    if not sep or not host or not port.isdigit() or not 0 < int(port) < 65536:
        raise ValueError(f"socks5 proxy must be 'host:port', got {address!r}")
    return address


class Client:
    """Non-blocking HTTP client driven by periodic perform() calls.

    Typical use inside a frame loop::

        client = Client()
        client.add_request(Request("GET", url).on_complete(handle))
        while running:
            client.perform()
            render()
    """

    def __init__(
        self,
        user_agent: str = DEFAULT_USER_AGENT,
        socks5: Optional[str] = None,
        transport=None,
        **transport_options,
    ):
        """Create a client.

        Args:
            user_agent: User-Agent header sent with every request
            socks5: Optional SOCKS5 proxy as ``host:port``
            transport: Transport instance, or one of ``"multiplexed"``,
                ``"threaded"``, ``"host"``. Defaults to the
                POLLHTTP_TRANSPORT environment variable, then multiplexed.
            **transport_options: Passed to the transport constructor when
                ``transport`` is a name (e.g. ``loop`` for ``"host"``)
        """
        self.config = ClientConfig(
            user_agent=user_agent,
            socks5=_validate_socks5(socks5) if socks5 else None,
        )

        if transport is None:
            transport = os.environ.get(TRANSPORT_ENV_VAR, DEFAULT_TRANSPORT)
        if isinstance(transport, str):
            transport = create_transport(transport, **transport_options)
        elif not isinstance(transport, Transport):
            raise TypeError(f"transport must be a Transport or a name, got {transport!r}")
        elif transport_options:
            raise TypeError("transport options require a transport name")

        self.transport = transport
        self.transport.bind(self.config)
        self._requests = []
        self._closed = False

    def __repr__(self):
        return f"<Client transport={self.transport.name} pending={len(self._requests)}>"

    def __len__(self):
        return len(self._requests)

    @property
    def user_agent(self):
        return self.config.user_agent

    @property
    def socks5(self):
        return self.config.socks5

    @property
    def pending(self):
        return len(self._requests)

    def add_request(self, request):
        """Take ownership of request and start it on the transport"""
        if self._closed:
            raise ClientClosedError("cannot add requests to a closed client")
        request._begin()
        self._requests.append(request)
        logger.debug("initiating %s %s via %s", request.method, request.url, self.transport.name)
        try:
            self.transport.initiate(request)
        except Exception:
            logger.exception("%s transport failed to initiate %s", self.transport.name, request.url)
            request._fail()
        return request

    def active(self):
        """True while any added request has not yet had its callback run"""
        return bool(self._requests)

    def perform(self):
        """Run one non-blocking tick.

        Advances the transport, then runs the callback of every completed
        request exactly once and drops it. Returns the number of requests
        finished during this tick.
        """
        self.transport.step()

        # Requests added from callbacks land in the fresh list
        scanning, self._requests = self._requests, []
        kept = []
        finished = 0
        for request in scanning:
            if not request.complete():
                kept.append(request)
                continue
            try:
                request._invoke_callback()
            except Exception:
                logger.exception("callback for %s %s raised", request.method, request.url)
            self.transport.release(request)
            finished += 1

        self._requests[:0] = kept
        return finished

    def close(self):
        """Release the transport; pending requests are dropped"""
        if self._closed:
            return
        self._closed = True
        if self._requests:
            logger.debug("closing client with %d pending requests", len(self._requests))
        self.transport.close()
        self._requests.clear()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
