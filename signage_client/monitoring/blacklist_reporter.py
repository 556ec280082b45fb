# blacklist_reporter.py
from __future__ import annotations

import threading
import time
from concurrent.futures import Future
from dataclasses import dataclass
from enum import Enum
from queue import Queue, Empty
from typing import Optional, Tuple

from signage_client.monitoring.structured_logger import log_info, log_error
from signage_client.utils.xmds_client import XmdsClient, XmdsError


class BlacklistScope(Enum):
    SINGLE = "Single"
    ALL = "All"


@dataclass(frozen=True)
class ReportRequest:
    media_id: int
    scope: BlacklistScope
    reason: str


@dataclass(frozen=True)
class ReportResult:
    media_id: int
    scope: BlacklistScope
    success: bool
    error: Optional[str] = None
    elapsed: float = 0.0


class BlacklistReporter:
    """
    Sends blacklist reports to XMDS from a background worker.

    submit() never blocks on the network; the returned Future resolves to a ReportResult
    (it never carries an exception). Reports are sent once, failures are only logged.
    """

    def __init__(self, client: XmdsClient, server_key: str, hardware_key: str, version: str,
                 worker_name: str = "blacklist-reporter"):
        self._client = client
        self._server_key = server_key
        self._hardware_key = hardware_key
        self._version = version
        self._queue: Queue = Queue()
        self._stop_event = threading.Event()
        self._thread: threading.Thread | None = None
        self._worker_name = worker_name

    def start(self):
        if self._thread and self._thread.is_alive():
            return
        self._stop_event.clear()
        self._thread = threading.Thread(target=self._worker, name=self._worker_name, daemon=True)
        self._thread.start()

    def stop(self, drain: bool = False, timeout: float = 5.0):
        if drain:
            self._queue.join()
        self._stop_event.set()
        if self._thread:
            self._thread.join(timeout=timeout)
        self._abandon_pending()

    def submit(self, request: ReportRequest) -> "Future[ReportResult]":
        future: Future = Future()
        self._queue.put((request, future))
        self.start()
        return future

    def __enter__(self) -> "BlacklistReporter":
        self.start()
        return self

    def __exit__(self, exc_type, exc, tb):
        self.stop(drain=True)

    def _abandon_pending(self):
        """Resolve reports still queued after the worker stopped"""
        while True:
            try:
                request, future = self._queue.get_nowait()
            except Empty:
                return
            try:
                log_error(
                    "blacklist.report.abandoned",
                    "Blacklist report not sent: reporter stopped",
                    context={"media_id": request.media_id, "scope": request.scope.value},
                )
                if future.set_running_or_notify_cancel():
                    future.set_result(ReportResult(
                        media_id=request.media_id,
                        scope=request.scope,
                        success=False,
                        error="reporter stopped",
                    ))
            finally:
                self._queue.task_done()

    def _worker(self):
        while not self._stop_event.is_set():
            try:
                request, future = self._queue.get(timeout=0.5)
            except Empty:
                continue

            try:
                result = self._send(request)
                if future.set_running_or_notify_cancel():
                    future.set_result(result)
            finally:
                self._queue.task_done()

    def _send(self, request: ReportRequest) -> ReportResult:
        started = time.monotonic()
        context = {"media_id": request.media_id, "scope": request.scope.value}
        try:
            accepted = self._client.black_list(
                self._server_key,
                self._hardware_key,
                request.media_id,
                request.scope.value,
                request.reason,
                self._version,
            )
            error = None if accepted else "Server did not accept the blacklist entry"
        except XmdsError as e:
            accepted, error = False, str(e)
        except Exception as e:
            accepted, error = False, f"{type(e).__name__}: {e}"

        result = ReportResult(
            media_id=request.media_id,
            scope=request.scope,
            success=accepted,
            error=error,
            elapsed=time.monotonic() - started,
        )
        if result.success:
            log_info("blacklist.report.sent", "Blacklist sending complete", context=context)
        else:
            log_error("blacklist.report.failed", "Error sending blacklist", context={**context, "error": error})
        return result


def reporter_from_settings(settings) -> Optional[BlacklistReporter]:
    """Build a reporter for the configured CMS, or None when reporting is disabled or unconfigured"""
    from signage_client.utils.hardware_key import HardwareKey

    if not settings.report_enabled or not settings.xmds_url:
        return None
    return BlacklistReporter(
        XmdsClient(settings.xmds_url, timeout=settings.report_timeout),
        server_key=settings.server_key,
        hardware_key=HardwareKey(settings.hardware_key).key,
        version=settings.client_version,
    )


def report_outcome(future: "Future[ReportResult]", timeout: Optional[float] = None) -> Tuple[bool, Optional[str]]:
    """Wait for a submitted report; returns (success, error)."""
    result = future.result(timeout=timeout)
    return result.success, result.error
