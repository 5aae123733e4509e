"""
Capacity-one handoff channels between pipeline stage threads.

A producer blocks in send() until the consumer has taken the previous item,
so every stage runs at the pace of the slowest one and only a constant number
of records is in flight. All blocking calls watch a shared abort event: once
it is set, a stage waiting on a channel raises PipelineAborted instead of
waiting forever.
"""

import logging
import queue
import threading
from typing import Any, Callable, Iterator, List

logger = logging.getLogger(__name__)

POLL_SECONDS = 0.05

_CLOSED = object()


class ChannelClosed(Exception):
    """The producer closed the channel and no items are left."""


class PipelineAborted(Exception):
    """The run is stopping; raised inside stages blocked on a channel."""


class Channel:
    """Single-producer, single-consumer handoff holding at most one item."""

    def __init__(self, abort: threading.Event):
        self._queue = queue.Queue(maxsize=1)
        self._abort = abort
        self._closed = False

    def send(self, item: Any) -> None:
        while True:
            if self._abort.is_set():
                raise PipelineAborted()
            try:
                self._queue.put(item, timeout=POLL_SECONDS)
                return
            except queue.Full:
                continue

    def close(self) -> None:
        """Mark end of stream once every sent item has been received."""
        self.send(_CLOSED)

    def receive(self) -> Any:
        if self._closed:
            raise ChannelClosed()
        while True:
            if self._abort.is_set():
                raise PipelineAborted()
            try:
                item = self._queue.get(timeout=POLL_SECONDS)
            except queue.Empty:
                continue
            if item is _CLOSED:
                self._closed = True
                raise ChannelClosed()
            return item

    def __iter__(self) -> Iterator[Any]:
        while True:
            try:
                yield self.receive()
            except ChannelClosed:
                return


class StageGroup:
    """
    Runs pipeline stages on threads and collects the first failure.

    A failing stage sets the abort event so every other stage unblocks, and
    join() re-raises that failure on the caller's thread.
    """

    def __init__(self):
        self.abort = threading.Event()
        self._threads: List[threading.Thread] = []
        self._errors: List[BaseException] = []
        self._lock = threading.Lock()

    def channel(self) -> Channel:
        return Channel(self.abort)

    def start(self, name: str, target: Callable[..., None], *args) -> None:
        thread = threading.Thread(
            target=self.run, args=(target, *args), name=name, daemon=True
        )
        thread.start()
        self._threads.append(thread)

    def run(self, target: Callable[..., None], *args) -> None:
        """Run one stage on the calling thread, recording any failure."""
        try:
            target(*args)
        except PipelineAborted:
            logger.debug(f"Stage {threading.current_thread().name} stopped early")
        except Exception as e:
            with self._lock:
                self._errors.append(e)
            self.abort.set()

    def join(self) -> None:
        """Release stages still waiting on a channel, wait for all of them."""
        self.abort.set()
        for thread in self._threads:
            thread.join()
        if self._errors:
            raise self._errors[0]
