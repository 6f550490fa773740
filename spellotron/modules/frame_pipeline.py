"""
Frame Pipeline Module for SPELLOTRON.

Single-writer queue between sensor capture and game logic. Capture
threads submit samples; one worker thread applies them to the session
strictly in arrival order.
"""

import logging
import threading
from queue import Empty, Full, Queue
from typing import Callable, Optional, Tuple

from ..core.config import settings
from ..core.data_types import PoseSample
from .game_session import FrameResult, GameSession

logger = logging.getLogger(__name__)

_STOP = object()


class FramePipeline:
    """
    Serializes frame processing for a GameSession.

    When the queue is full the oldest pending frame is dropped, so a slow
    consumer falls behind by at most `maxsize` frames and never reorders
    them. Frames submitted while the session is paused are skipped, and
    frames still queued from before a resume are skipped by the worker.

    Usage:
        pipeline = FramePipeline(session, on_result=update_overlay)
        pipeline.start()
        # in the sensor callback
        pipeline.submit(sample)
        ...
        pipeline.stop()
    """

    def __init__(
        self,
        session: GameSession,
        maxsize: int = settings.FRAME_QUEUE_SIZE,
        on_result: Optional[Callable[[FrameResult], None]] = None,
    ):
        if maxsize < 1:
            raise ValueError("maxsize must be >= 1")
        self._session = session
        self._queue: Queue = Queue(maxsize=maxsize)
        self._on_result = on_result
        self._submit_lock = threading.Lock()
        self._thread: Optional[threading.Thread] = None
        self._stop_requested = False
        self._error: Optional[BaseException] = None
        self.dropped_frames = 0
        self.skipped_frames = 0
        self.processed_frames = 0

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    @property
    def pending(self) -> int:
        return self._queue.qsize()

    def start(self) -> None:
        """Start the worker thread; no-op while a worker is still alive."""
        if self.is_running:
            if self._stop_requested:
                logger.warning("FramePipeline worker still finishing; not starting another")
            return
        self._error = None
        self._stop_requested = False
        self._thread = threading.Thread(target=self._worker_loop, name="spellotron-frames")
        self._thread.daemon = True
        self._thread.start()
        logger.info("FramePipeline started")

    def submit(self, sample: PoseSample, now: Optional[float] = None) -> bool:
        """
        Queue a frame for processing.

        Args:
            sample: Player skeleton.
            now: Frame time; resolved by the session when omitted.

        Returns:
            bool: False when the frame was skipped because the game is paused.
        """
        self._raise_if_failed()
        item: Tuple[PoseSample, Optional[float], int] = (sample, now, self._session.resume_count)
        with self._submit_lock:
            if self._session.is_paused:
                self.skipped_frames += 1
                return False
            try:
                self._queue.put_nowait(item)
            except Full:
                try:
                    self._queue.get_nowait()
                    self._queue.task_done()
                    self.dropped_frames += 1
                except Empty:
                    pass
                self._queue.put_nowait(item)
            return True

    def wait_idle(self) -> None:
        """Block until every submitted frame has been processed."""
        self._queue.join()
        self._raise_if_failed()

    def stop(self, timeout: Optional[float] = 2.0) -> bool:
        """
        Process what is queued, then stop the worker.

        Returns:
            bool: True once the worker has exited; False if it is still
            busy after `timeout` (call stop again later).
        """
        if self._thread is None:
            return True
        if not self._stop_requested:
            self._stop_requested = True
            self._queue.put(_STOP)
        self._thread.join(timeout)
        if self._thread.is_alive():
            logger.warning(f"FramePipeline worker did not stop within {timeout}s")
            return False
        self._thread = None
        self._stop_requested = False
        logger.info(
            f"FramePipeline stopped: processed={self.processed_frames}, dropped={self.dropped_frames}, "
            f"skipped={self.skipped_frames}"
        )
        if self._error is not None:
            self._drain()
        self._raise_if_failed()
        return True

    def _raise_if_failed(self) -> None:
        if self._error is not None:
            raise RuntimeError("Frame worker failed") from self._error

    def _worker_loop(self) -> None:
        while True:
            item = self._queue.get()
            try:
                if item is _STOP:
                    return
                sample, now, resume_count = item
                if resume_count != self._session.resume_count:
                    self.skipped_frames += 1
                    continue
                result = self._session.process_frame(sample, now)
                self.processed_frames += 1
                if self._on_result:
                    self._on_result(result)
            except Exception as e:
                logger.exception("Frame processing failed")
                self._error = e
                self._drain()
                return
            finally:
                self._queue.task_done()

    def _drain(self) -> None:
        while True:
            try:
                self._queue.get_nowait()
            except Empty:
                return
            self._queue.task_done()
