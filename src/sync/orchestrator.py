"""Sync orchestration module for codetrack.

One sync pass reads every enabled source, merges them, builds the usage window
and publishes it to the shared store:

    IDLE -> LOADING -> MERGING -> PUBLISHING -> SUCCESS | FAILED -> IDLE

Sources that cannot be read or parsed are skipped. At most one pass runs at a
time; requests that arrive meanwhile are folded into a single follow-up pass.
"""

import concurrent.futures
import threading
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Optional

from calculations.window import build_usage_window
from config import AppConfig
from constants import ERROR_NO_SOURCES, MAX_DATA_SOURCES, SOURCE_FETCH_TIMEOUT_SECONDS, SYNC_INTERVAL_SECONDS
from data.merger import merge_usage_data
from data.models import DataSource, UsageData, UsageDay
from data.parser import parse_usage_payload
from errors import AllSourcesFailedError, CodeTrackError, NoEnabledSourcesError, SyncError
from settings.store import ConfigurationStore
from sync.accessor import FileAccessor, LocalFileAccessor
from sync.shared_store import SharedStore
from utils.logging_config import get_logger, log_with_context, source_context

# Initialize logger
logger = get_logger()


class SyncState(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    MERGING = "merging"
    PUBLISHING = "publishing"
    SUCCESS = "success"
    FAILED = "failed"


@dataclass
class SyncResult:
    """Outcome of a sync request."""

    success: bool
    error: Optional[SyncError] = None
    days: list[UsageDay] = field(default_factory=list)
    loaded_sources: list[str] = field(default_factory=list)
    skipped_sources: dict[str, str] = field(default_factory=dict)
    # True when the request was folded into a pass already in flight
    coalesced: bool = False
    finished_at: Optional[datetime] = None


class SyncOrchestrator:
    """Drives sync passes against injected configuration, file access and store."""

    def __init__(
        self,
        config_store: ConfigurationStore,
        accessor: FileAccessor,
        shared_store: SharedStore,
        today: Callable[[], date] = date.today,
        clock: Callable[[], datetime] = datetime.now,
        fetch_timeout: float = SOURCE_FETCH_TIMEOUT_SECONDS,
        max_workers: int = MAX_DATA_SOURCES,
    ):
        self.config_store = config_store
        self.accessor = accessor
        self.shared_store = shared_store
        self._today = today
        self._clock = clock
        self._fetch_timeout = fetch_timeout
        self._max_workers = max_workers

        self._lock = threading.Lock()
        self._idle = threading.Condition(self._lock)
        self._running = False
        self._rerun_requested = False
        self._background = concurrent.futures.ThreadPoolExecutor(max_workers=1, thread_name_prefix="codetrack-sync")
        self._stop_periodic = threading.Event()
        self._periodic_thread: Optional[threading.Thread] = None
        self._last_request: Optional["concurrent.futures.Future[SyncResult]"] = None

        self.state = SyncState.IDLE
        self.last_result: Optional[SyncResult] = None

    @classmethod
    def from_config(cls, config: AppConfig) -> "SyncOrchestrator":
        """Build an orchestrator wired to the local filesystem and store paths in ``config``."""
        return cls(
            config_store=ConfigurationStore(config.settings_path, max_data_sources=config.max_data_sources),
            accessor=LocalFileAccessor(),
            shared_store=SharedStore(config.store_path),
            fetch_timeout=config.source_fetch_timeout,
            max_workers=config.max_data_sources,
        )

    # Entry points

    def sync(self) -> SyncResult:
        """Run a sync pass, blocking until it completes.

        If a pass is already running, a single follow-up pass is scheduled
        and a ``coalesced`` result is returned immediately.
        """
        with self._lock:
            if self._running:
                self._rerun_requested = True
                log_with_context(logger, "INFO", "Sync already in progress, coalescing request")
                return SyncResult(success=False, coalesced=True)
            self._running = True

        try:
            while True:
                result = self._run_pass()
                with self._lock:
                    if not self._rerun_requested:
                        self._running = False
                        self._idle.notify_all()
                        return result
                    self._rerun_requested = False
                log_with_context(logger, "INFO", "Running coalesced follow-up sync")
        except BaseException:
            with self._lock:
                self._running = False
                self._idle.notify_all()
            raise

    def request_sync(self) -> "concurrent.futures.Future[SyncResult]":
        """Schedule a sync pass on the background worker without blocking."""
        future = self._background.submit(self.sync)
        self._last_request = future
        return future

    def wait_for_sync(self, timeout: Optional[float] = None) -> Optional[SyncResult]:
        """Block until requested passes finish, including any coalesced follow-up.

        Returns:
            The most recent pass result, or None if no pass has run yet
        """
        if self._last_request is not None:
            self._last_request.result(timeout)
        with self._idle:
            self._idle.wait_for(lambda: not self._running, timeout)
        return self.last_result

    def watch_configuration(self) -> None:
        """Resync whenever sources, thresholds or the window change."""
        self.config_store.add_listener(self.request_sync)

    def start_periodic_sync(self, interval: float = SYNC_INTERVAL_SECONDS) -> None:
        """Sync now and then every ``interval`` seconds until stopped."""
        if self._periodic_thread is not None and self._periodic_thread.is_alive():
            return

        self._stop_periodic.clear()

        def _loop() -> None:
            while not self._stop_periodic.is_set():
                self.sync()
                if self._stop_periodic.wait(interval):
                    break
                log_with_context(logger, "INFO", "Performing scheduled data sync")

        self._periodic_thread = threading.Thread(target=_loop, name="codetrack-periodic", daemon=True)
        self._periodic_thread.start()
        log_with_context(logger, "INFO", "Periodic sync started", interval_seconds=interval)

    def stop_periodic_sync(self, timeout: Optional[float] = None) -> None:
        self._stop_periodic.set()
        if self._periodic_thread is not None:
            self._periodic_thread.join(timeout)
            self._periodic_thread = None

    def shutdown(self) -> None:
        self.stop_periodic_sync()
        self._background.shutdown(wait=True)

    # Pass

    def _set_state(self, state: SyncState) -> None:
        self.state = state
        log_with_context(logger, "DEBUG", "Sync state changed", state=state.value)

    def _run_pass(self) -> SyncResult:
        skipped: dict[str, str] = {}
        try:
            self._set_state(SyncState.LOADING)
            sources = self.config_store.enabled_sources()
            if not sources:
                raise NoEnabledSourcesError(ERROR_NO_SOURCES)

            loaded, skipped = self._load_sources(sources)
            if not loaded:
                raise AllSourcesFailedError(skipped)

            self._set_state(SyncState.MERGING)
            unified = merge_usage_data(usage for _, usage in loaded)

            self._set_state(SyncState.PUBLISHING)
            days = build_usage_window(
                unified,
                self.config_store.window_length,
                self.config_store.thresholds,
                self._today(),
            )
            self.shared_store.publish(days, self._clock())

        except SyncError as e:
            result = self._fail(e, skipped)
        except Exception as e:
            log_with_context(
                logger, "ERROR", "Unexpected sync failure", error_type=type(e).__name__, error_message=str(e)
            )
            error = SyncError(f"Unexpected sync failure: {e}")
            error.__cause__ = e
            result = self._fail(error, skipped)
        else:
            self._set_state(SyncState.SUCCESS)
            result = SyncResult(
                success=True,
                days=days,
                loaded_sources=[source.id for source, _ in loaded],
                skipped_sources=skipped,
                finished_at=self._clock(),
            )
            log_with_context(
                logger,
                "INFO",
                "Sync completed",
                days=len(days),
                active_days=sum(1 for day in days if day.seconds > 0),
                loaded_sources=len(loaded),
                skipped_sources=len(skipped),
            )

        self.last_result = result
        self._set_state(SyncState.IDLE)
        return result

    def _fail(self, error: SyncError, skipped: dict[str, str]) -> SyncResult:
        self._set_state(SyncState.FAILED)
        log_with_context(
            logger,
            "ERROR",
            "Sync failed",
            error_type=type(error).__name__,
            error_message=str(error),
            skipped_sources=len(skipped),
        )
        return SyncResult(success=False, error=error, skipped_sources=skipped, finished_at=self._clock())

    def _load_source(self, source: DataSource) -> UsageData:
        return parse_usage_payload(self.accessor.resolve(source.locator))

    def _load_sources(
        self, sources: Sequence[DataSource]
    ) -> tuple[list[tuple[DataSource, UsageData]], dict[str, str]]:
        """Read and parse sources in parallel.

        Returns:
            Tuple of (loaded sources with their usage in configured order,
            failure reason by source id)
        """
        loaded: list[tuple[DataSource, UsageData]] = []
        skipped: dict[str, str] = {}

        executor = concurrent.futures.ThreadPoolExecutor(
            max_workers=max(1, min(len(sources), self._max_workers)), thread_name_prefix="codetrack-source"
        )
        try:
            futures = [(source, executor.submit(self._load_source, source)) for source in sources]
            for source, future in futures:
                try:
                    usage = future.result(timeout=self._fetch_timeout)
                except concurrent.futures.TimeoutError:
                    reason = f"Timed out after {self._fetch_timeout}s"
                except (CodeTrackError, OSError) as e:
                    reason = str(e)
                else:
                    loaded.append((source, usage))
                    log_with_context(logger, "DEBUG", "Source loaded", days=len(usage), **source_context(source))
                    continue

                skipped[source.id] = reason
                log_with_context(logger, "WARNING", "Skipping data source", reason=reason, **source_context(source))
        finally:
            executor.shutdown(wait=False, cancel_futures=True)

        return loaded, skipped
