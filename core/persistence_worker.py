"""Background persistence worker that keeps storage I/O off the input loop."""

import logging
import threading
import time
from dataclasses import dataclass, field
from pathlib import Path
from queue import Empty, Full, Queue
from typing import List, Optional, Union

from core.errors import StorageError
from core.mistake_miner import (
    DEFAULT_MINED_LIST_NAME,
    DEFAULT_MINED_LIST_SIZE,
    build_mistake_list,
)
from core.models import GameStats, SessionRecord, WordList
from core.storage import Storage
from core.word_bank import save_word_list

log = logging.getLogger("typeracer.persistence")


@dataclass(frozen=True)
class SaveStatsRequest:
    """Overwrite aggregate stats."""
    stats: GameStats


@dataclass(frozen=True)
class SaveSessionRequest:
    """Insert a completed session."""
    record: SessionRecord


@dataclass(frozen=True)
class SaveStatsAndSessionRequest:
    """Insert a session and update stats in one transaction."""
    stats: GameStats
    record: SessionRecord


@dataclass(frozen=True)
class MineMistakesRequest:
    """Rebuild the adaptive word list from the full session history."""
    list_name: str = DEFAULT_MINED_LIST_NAME
    list_size: int = DEFAULT_MINED_LIST_SIZE
    output_dir: Optional[Path] = None  # where to write the word list artifact


PersistRequest = Union[
    SaveStatsRequest, SaveSessionRequest, SaveStatsAndSessionRequest, MineMistakesRequest
]


@dataclass(frozen=True)
class StorageFailure:
    """A request that could not be completed."""
    request_kind: str
    message: str
    timestamp_ms: int = field(default_factory=lambda: int(time.time() * 1000))


@dataclass(frozen=True)
class MinedWordList:
    """Result of a MineMistakesRequest."""
    word_list: WordList


_STOP = object()


class PersistenceWorker:
    """Single consumer of persistence requests.

    Requests are processed in the order they were submitted. Failures are
    never raised across the queue; they are put on ``errors`` as
    StorageFailure values. On ``stop()`` every request accepted before the
    call is drained, and every submission made before ``start()`` or after
    ``stop()`` is rejected and reported.
    """

    def __init__(self, storage: Storage, max_queue_size: int = 0):
        """Initialize worker.

        Args:
            storage: Storage owned exclusively by this worker
            max_queue_size: Request queue bound (0 = unbounded)
        """
        self.storage = storage
        self.requests: Queue = Queue(maxsize=max_queue_size)
        self.errors: Queue[StorageFailure] = Queue()
        self.results: Queue[MinedWordList] = Queue()
        self.running = False
        self.thread: Optional[threading.Thread] = None
        self._closed = False
        self._submit_lock = threading.Lock()
        self._drop_count = 0
        self.processed_count = 0

    def start(self) -> None:
        """Start the worker thread."""
        if self.running:
            return

        self.running = True
        self.thread = threading.Thread(target=self._run, name="persistence-worker", daemon=True)
        self.thread.start()
        log.info("Persistence worker started")

    def stop(self, timeout: float = 5.0) -> None:
        """Stop accepting requests, drain the queue and wait for the thread.

        Requests left behind by a dead worker thread are reported on
        ``errors`` instead of being dropped.
        """
        with self._submit_lock:
            if self._closed:
                return
            self._closed = True
            alive = self.is_alive()
            if alive:
                # Blocks only if a bounded queue is full; the worker keeps draining
                self.requests.put(_STOP)

        if alive:
            self.thread.join(timeout=timeout)
            if self.thread.is_alive():
                log.warning(f"Persistence worker did not stop within {timeout}s")
        else:
            self._fail_stranded()
        self.running = False
        log.info(f"Persistence worker stopped after {self.processed_count} requests")

    @property
    def closed(self) -> bool:
        return self._closed

    def is_alive(self) -> bool:
        return self.thread is not None and self.thread.is_alive()

    def submit(self, request: PersistRequest) -> bool:
        """Enqueue a request without blocking.

        Returns:
            True if accepted, False if rejected (reported on ``errors``)
        """
        kind = type(request).__name__
        with self._submit_lock:
            if self._closed:
                self._reject(kind, "persistence worker is shut down")
                return False
            if not self.is_alive():
                self._reject(kind, "persistence worker is not running")
                return False
            try:
                self.requests.put_nowait(request)
            except Full:
                self._drop_count += 1
                self._reject(kind, f"request queue full, dropped {self._drop_count} requests")
                return False
        return True

    def _reject(self, kind: str, message: str) -> None:
        log.warning(f"Rejected {kind}: {message}")
        self.errors.put(StorageFailure(request_kind=kind, message=message))

    def _run(self) -> None:
        """Drain requests until the stop sentinel."""
        while True:
            request = self.requests.get()
            try:
                if request is _STOP:
                    return
                self._process(request)
            finally:
                self.requests.task_done()

    def _process(self, request: PersistRequest) -> None:
        """Perform one request, relaying failures as data."""
        kind = type(request).__name__
        try:
            if isinstance(request, SaveStatsAndSessionRequest):
                session_id = self.storage.save_stats_and_session(request.stats, request.record)
                log.info(f"Saved session {session_id} with stats")
            elif isinstance(request, SaveSessionRequest):
                session_id = self.storage.insert_session(request.record)
                log.info(f"Saved session {session_id}")
            elif isinstance(request, SaveStatsRequest):
                self.storage.update_game_stats(request.stats)
                log.debug("Saved game stats")
            elif isinstance(request, MineMistakesRequest):
                self._mine(request)
            else:
                raise StorageError(f"unknown request type {kind}")
        except (StorageError, OSError, ValueError) as e:
            log.error(f"{kind} failed: {e}")
            self.errors.put(StorageFailure(request_kind=kind, message=str(e)))
        except Exception as e:
            # The worker thread must outlive any single request
            log.exception(f"{kind} failed unexpectedly")
            self.errors.put(StorageFailure(request_kind=kind, message=f"{type(e).__name__}: {e}"))
        finally:
            self.processed_count += 1

    def _mine(self, request: MineMistakesRequest) -> None:
        history = self.storage.get_sessions()
        word_list = build_mistake_list(history, request.list_name, request.list_size)
        if request.output_dir is not None:
            save_word_list(word_list, request.output_dir)
        if not word_list.words:
            log.info("No mistyped words in history, keeping current word lists")
            return
        self.results.put(MinedWordList(word_list=word_list))

    def _fail_stranded(self) -> None:
        """Report every request still queued while no thread is draining it."""
        for request in _drain(self.requests):
            self.requests.task_done()
            if request is _STOP:
                continue
            self._reject(type(request).__name__, "persistence worker is not running")

    def poll_errors(self) -> List[StorageFailure]:
        """Take all pending failures without blocking."""
        return _drain(self.errors)

    def poll_results(self) -> List[MinedWordList]:
        """Take all pending mining results without blocking."""
        return _drain(self.results)

    def wait_idle(self) -> None:
        """Block until every accepted request has been processed."""
        self.requests.join()


def _drain(queue: Queue) -> list:
    items = []
    while True:
        try:
            items.append(queue.get_nowait())
        except Empty:
            return items
