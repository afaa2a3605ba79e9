"""
Request state machine shared by every transport
"""

import logging
import threading
import time
from concurrent.futures import Future, InvalidStateError
from enum import Enum

from pollhttp._exceptions import RequestStateError
from pollhttp._status import StatusCode, is_sentinel
from pollhttp._url import Endpoint

logger = logging.getLogger(__name__)


class RequestState(Enum):
    CREATED = "created"
    INITIATING = "initiating"
    IN_FLIGHT = "in_flight"
    COMPLETE = "complete"


class Request:
    """A single HTTP call whose outcome is delivered by callback.

    The request is mutated by the transport it is bound to, possibly from a
    worker thread, and read by the thread that drives ``Client.perform()``.
    Body appends and the terminal transition share one lock, and the
    terminal status travels through a Future, so a reader that sees
    ``complete()`` return True also sees every byte appended before it.
    """

    def __init__(self, method, url, data=None, headers=None):
        """Create a request.

        Args:
            method: HTTP method (GET, POST, etc.)
            url: Target URL string or an already parsed Endpoint
            data: Optional request body (str is UTF-8 encoded)
            headers: Optional request headers

        Raises:
            URLParseError: if ``url`` is not a well-formed URL
        """
        self.method = method.upper()
        self.endpoint = url if isinstance(url, Endpoint) else Endpoint.parse(url)
        if isinstance(data, str):
            data = data.encode("utf-8")
        self.body = data
        self.headers = dict(headers or {})

        self._callback = None
        self._state = RequestState.CREATED
        self._lock = threading.Lock()
        self._body = bytearray()
        self._outcome = Future()
        self._started_at = None
        self._completed_at = None

        # Backend specific resource, owned by the bound transport
        self.handle = None

    def __repr__(self):
        return f"<Request {self.method} {self.url} [{self._state.value}]>"

    @property
    def url(self):
        return self.endpoint.to_string()

    @property
    def state(self):
        return self._state

    def on_complete(self, callback):
        """Register the completion callback, replacing any previous one"""
        self._callback = callback
        return self

    def complete(self):
        """True once the transport has delivered the final status"""
        return self._outcome.done()

    def status(self):
        """Final status code, or None while the request is pending.

        0 and 1 are reserved: connection failed and blocked by policy.
        """
        if not self._outcome.done():
            return None
        return self._outcome.result()

    @property
    def failed(self):
        return self.complete() and is_sentinel(self.status())

    @property
    def elapsed(self):
        """Seconds from initiation to completion, None until complete"""
        if self._started_at is None or self._completed_at is None:
            return None
        return self._completed_at - self._started_at

    def content(self):
        """Copy of the response body received so far"""
        with self._lock:
            return bytes(self._body)

    def data(self):
        """Zero-copy read-only view of the response body"""
        if not self.complete():
            # An exported view pins the buffer and would break appends
            raise RequestStateError("body view is only available once the request is complete")
        return memoryview(self._body).toreadonly()

    def text(self, encoding="utf-8"):
        """Decode the response body as text"""
        content = self.content()
        try:
            return content.decode(encoding)
        except UnicodeDecodeError:
            return content.decode("latin-1", errors="replace")

    # Lifecycle transitions, driven by Client and Transport

    def _begin(self):
        if self._state is not RequestState.CREATED:
            raise RequestStateError(f"{self!r} was already added to a client")
        self._state = RequestState.INITIATING
        self._started_at = time.monotonic()

    def _mark_in_flight(self, handle=None):
        with self._lock:
            if self._state is RequestState.INITIATING:
                self._state = RequestState.IN_FLIGHT
            self.handle = handle

    def _append(self, chunk):
        with self._lock:
            if self._outcome.done():
                raise RequestStateError(f"{self!r} received data after completion")
            self._body += chunk

    def _complete(self, status):
        if not self._finish(status):
            raise RequestStateError(f"{self!r} completed twice")

    def _fail(self, status=StatusCode.CONNECTION_FAILED):
        """Complete with a sentinel status unless already complete"""
        return self._finish(status)

    def _finish(self, status):
        with self._lock:
            if self._outcome.done():
                return False
            self._state = RequestState.COMPLETE
            self._completed_at = time.monotonic()
            try:
                self._outcome.set_result(int(status))
            except InvalidStateError:
                return False
        logger.debug("%s %s completed with status %s", self.method, self.url, status)
        return True

    def _invoke_callback(self):
        if self._callback is not None:
            self._callback(self)
