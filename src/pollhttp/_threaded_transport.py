"""
Threaded transport: blocking urllib3 reads on a dedicated worker per request
"""

import logging
import threading
from itertools import count

import urllib3

from pollhttp._transport import Transport, failure_status, register

logger = logging.getLogger(__name__)

DEFAULT_CHUNK_SIZE = 1024


@register
class ThreadedTransport(Transport):
    """Run each request on its own background thread.

    Workers append chunks as they arrive and complete the request when the
    body ends. They never touch the client registry; the polling thread
    observes completion and joins the worker on release.
    """

    name = "threaded"

    def __init__(self, chunk_size=DEFAULT_CHUNK_SIZE, pool_maxsize=10):
        super().__init__()
        self.chunk_size = chunk_size
        self.pool_maxsize = pool_maxsize
        self._pool = urllib3.PoolManager(maxsize=pool_maxsize)
        self._workers = {}
        self._workers_lock = threading.Lock()
        self._ids = count(1)

    def initiate(self, request):
        self.reject_proxy()

        worker = threading.Thread(
            target=self._run,
            args=(request,),
            name=f"pollhttp-worker-{next(self._ids)}",
            daemon=True,
        )
        with self._workers_lock:
            self._workers[request] = worker
        try:
            worker.start()
        except RuntimeError as exc:
            logger.warning("could not start worker for %s: %s", request.url, exc)
            with self._workers_lock:
                self._workers.pop(request, None)
            request._fail(failure_status(exc))
            return
        request._mark_in_flight(worker)

    def _run(self, request):
        try:
            self._perform(request)
        except Exception:
            logger.exception("worker for %s %s crashed", request.method, request.url)
            request._fail()

    def _headers(self, request):
        headers = {"User-Agent": self.user_agent} if self.user_agent else {}
        headers.update(request.headers)
        return headers

    def _perform(self, request):
        try:
            response = self._pool.request(
                request.method,
                request.url,
                body=request.body,
                headers=self._headers(request),
                preload_content=False,
                redirect=False,
                retries=False,
            )
        except (urllib3.exceptions.HTTPError, OSError) as exc:
            logger.debug("%s %s failed: %s", request.method, request.url, exc)
            request._fail(failure_status(exc))
            return

        try:
            for chunk in response.stream(self.chunk_size):
                request._append(chunk)
        except (urllib3.exceptions.HTTPError, OSError) as exc:
            logger.debug("reading %s failed: %s", request.url, exc)
            request._fail(failure_status(exc))
            return
        finally:
            response.release_conn()

        request._complete(response.status)

    def release(self, request):
        with self._workers_lock:
            worker = self._workers.pop(request, None)
        if worker is not None and worker is not threading.current_thread():
            worker.join()
        request.handle = None

    def close(self):
        with self._workers_lock:
            workers = list(self._workers.values())
            self._workers.clear()
        for worker in workers:
            worker.join()
        self._pool.clear()
