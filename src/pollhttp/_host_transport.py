"""
Host-managed transport: aiohttp coroutines on an asyncio loop owned by the host.

The transport never runs the loop itself. It schedules one fetch per request
and registers a done callback; the host's loop decides when the fetch runs
and when the callback fires. The callback delivers the whole body at once
and completes the request.
"""

import asyncio
import functools
import logging

import aiohttp

from pollhttp._transport import Transport, failure_status, register

logger = logging.getLogger(__name__)


@register
class HostManagedTransport(Transport):
    """Schedule requests on a host asyncio event loop"""

    name = "host"

    def __init__(self, loop=None):
        """
        Args:
            loop: The host's event loop. Defaults to the loop running in
                the calling thread when the first request is initiated.
        """
        super().__init__()
        self.loop = loop

    def _host_loop(self):
        if self.loop is None:
            self.loop = asyncio.get_running_loop()
        return self.loop

    def initiate(self, request):
        self.reject_proxy()
        coro = self._fetch(request)
        try:
            future = asyncio.run_coroutine_threadsafe(coro, self._host_loop())
        except RuntimeError as exc:
            # no running loop to adopt, or the host already closed it
            coro.close()
            logger.warning("cannot schedule %s on host loop: %s", request.url, exc)
            request._fail(failure_status(exc))
            return
        future.add_done_callback(functools.partial(self._on_done, request))
        request._mark_in_flight(future)

    async def _fetch(self, request):
        headers = {"User-Agent": self.user_agent} if self.user_agent else None
        async with aiohttp.ClientSession(headers=headers) as session:
            async with session.request(
                request.method,
                request.url,
                data=request.body,
                headers=request.headers or None,
                allow_redirects=False,
            ) as response:
                body = await response.read()
                return response.status, body

    def _on_done(self, request, future):
        if future.cancelled():
            logger.debug("fetch for %s was cancelled by the host", request.url)
            request._fail()
            return

        exc = future.exception()
        if exc is not None:
            logger.debug("%s %s failed: %s", request.method, request.url, exc)
            request._fail(failure_status(exc))
            return

        status, body = future.result()
        request._append(body)
        request._complete(status)
