"""
Multiplexed transport built on the libcurl multi interface (pycurl).

All requests share one CurlMulti handle. Nothing happens between ticks:
each call to step() runs curl_multi_perform once and collects finished
transfers, so body writes and completions always occur on the thread that
calls Client.perform().
"""

import logging

import pycurl

from pollhttp._exceptions import panic
from pollhttp._status import StatusCode
from pollhttp._transport import Transport, register

logger = logging.getLogger(__name__)


@register
class MultiplexedTransport(Transport):
    """Drive every request from a single shared pycurl.CurlMulti"""

    name = "multiplexed"

    def __init__(self):
        super().__init__()
        self._multi = pycurl.CurlMulti()
        self._requests = {}
        self.running = 0

    def _configure(self, curl, request):
        curl.setopt(pycurl.URL, request.url)
        curl.setopt(pycurl.WRITEFUNCTION, request._append)
        curl.setopt(pycurl.NOSIGNAL, 1)
        if self.user_agent:
            curl.setopt(pycurl.USERAGENT, self.user_agent)
        if self.proxy:
            curl.setopt(pycurl.PROXY, self.proxy)
        if request.headers:
            curl.setopt(
                pycurl.HTTPHEADER,
                [f"{key}: {value}" for key, value in request.headers.items()],
            )

        method = request.method
        if method == "GET" and request.body is None:
            curl.setopt(pycurl.HTTPGET, 1)
        elif method == "HEAD":
            curl.setopt(pycurl.NOBODY, 1)
        else:
            if method != "POST":
                curl.setopt(pycurl.CUSTOMREQUEST, method)
            if method == "POST" or request.body is not None:
                body = request.body or b""
                curl.setopt(pycurl.POSTFIELDSIZE, len(body))
                curl.setopt(pycurl.POSTFIELDS, body)

    def initiate(self, request):
        curl = None
        try:
            curl = pycurl.Curl()
            self._configure(curl, request)
            self._multi.add_handle(curl)
        except (pycurl.error, UnicodeEncodeError, TypeError, ValueError) as exc:
            # pycurl only accepts ASCII str options
            logger.warning("failed to set up curl handle for %s: %s", request.url, exc)
            if curl is not None:
                curl.close()
            request._fail(StatusCode.CONNECTION_FAILED)
            return

        self._requests[curl] = request
        request._mark_in_flight(curl)
        logger.debug("added %s %s to curl multi handle", request.method, request.url)

    def step(self):
        while True:
            ret, self.running = self._multi.perform()
            if ret != pycurl.E_CALL_MULTI_PERFORM:
                break

        while True:
            queued, succeeded, failed = self._multi.info_read()
            for curl in succeeded:
                self._lookup(curl)._complete(curl.getinfo(pycurl.RESPONSE_CODE))
            for curl, errno, message in failed:
                request = self._lookup(curl)
                logger.debug("curl error %s for %s: %s", errno, request.url, message)
                request._complete(StatusCode.CONNECTION_FAILED)
            if queued == 0:
                break

    def _lookup(self, curl):
        request = self._requests.get(curl)
        if request is None:
            panic("CURL referred to non-existent request", backend=type(self).__name__)
        return request

    def release(self, request):
        curl = request.handle
        if curl is None:
            return
        if self._requests.pop(curl, None) is not None:
            self._multi.remove_handle(curl)
        curl.close()
        request.handle = None

    def close(self):
        for curl in list(self._requests):
            self._multi.remove_handle(curl)
            curl.close()
        self._requests.clear()
        self._multi.close()
