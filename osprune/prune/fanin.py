"""Fan-in of kind listings.

Each kind lister runs in its own worker thread and hands resources to a
shared bounded queue. The consumer sees resources in arrival order; a slow
kind never holds back the others.
"""

from __future__ import annotations

import logging
import queue
import threading
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Dict, Iterable, Iterator, Mapping, Optional

from ..errors import ListingIncompleteError
from ..models.resource import Resource

logger = logging.getLogger(__name__)

# Seconds a blocked producer waits before re-checking the stop event
_PUT_TIMEOUT = 0.2


@dataclass
class _SourceFinished:
    """Marker posted by a producer when its listing ended."""

    kind: str
    listed: int
    error: Optional[BaseException] = None
    stopped: bool = False


class FanIn:
    """Merge independent resource listings into one stream.

    Ordering: resources of one kind keep the order their lister produced them;
    no order is guaranteed across kinds. Iteration ends once every source
    has ended. A source that raises, or that is cut short by the stop event
    or by the consumer going away, is recorded in ``incomplete`` and does not
    affect the others.

    Attributes:
        sources: Mapping of kind key to lazy resource iterable
        stop_event: Event that makes producers stop at their next hand-off
        queue_size: Capacity of the shared queue
        incomplete: Kind keys whose listing ended early, with the error
        counts: Number of resources each kind produced
    """

    def __init__(
        self,
        sources: Mapping[str, Iterable[Resource]],
        stop_event: Optional[threading.Event] = None,
        queue_size: int = 64,
    ) -> None:
        self.sources = dict(sources)
        self.stop_event = stop_event or threading.Event()
        self.queue_size = queue_size
        self.incomplete: Dict[str, BaseException] = {}
        self.counts: Dict[str, int] = {}

    def __iter__(self) -> Iterator[Resource]:
        if not self.sources:
            return

        channel: "queue.Queue[object]" = queue.Queue(maxsize=self.queue_size)
        # Set when the consumer goes away, independent of the caller's stop event
        closed = threading.Event()

        executor = ThreadPoolExecutor(max_workers=len(self.sources), thread_name_prefix="lister")
        futures = []
        try:
            for kind, source in self.sources.items():
                futures.append(executor.submit(self._produce, kind, source, channel, closed))

            pending = len(self.sources)
            while pending:
                item = channel.get()
                if isinstance(item, _SourceFinished):
                    pending -= 1
                    self._finish(item)
                    continue
                yield item  # type: ignore[misc]
        finally:
            closed.set()
            # Drain so producers blocked on a full queue can observe the close
            self._drain(channel)
            executor.shutdown(wait=True)
            # Markers the consumer never received belong to listings it did not see to the end
            for future in futures:
                marker = future.result()
                if marker.kind not in self.counts:
                    marker.stopped = True
                    self._finish(marker)

    def _produce(
        self,
        kind: str,
        source: Iterable[Resource],
        channel: "queue.Queue[object]",
        closed: threading.Event,
    ) -> _SourceFinished:
        marker = _SourceFinished(kind=kind, listed=0)
        try:
            for resource in source:
                if not self._put(channel, resource, closed):
                    marker.stopped = True
                    break
                marker.listed += 1
        except Exception as e:
            marker.error = e
        self._put(channel, marker, closed)
        return marker

    def _put(self, channel: "queue.Queue[object]", item: object, closed: threading.Event) -> bool:
        """Hand an item to the consumer. Returns False once the pipeline stopped."""
        while True:
            if closed.is_set():
                return False
            if self.stop_event.is_set() and not isinstance(item, _SourceFinished):
                return False
            try:
                channel.put(item, timeout=_PUT_TIMEOUT)
                return True
            except queue.Full:
                continue

    def _finish(self, marker: _SourceFinished) -> None:
        self.counts[marker.kind] = marker.listed
        if marker.error is not None:
            self.incomplete[marker.kind] = marker.error
            logger.warning(
                f"Listing of {marker.kind} ended early after {marker.listed} resource(s); "
                f"the report is incomplete for this kind: {marker.error}"
            )
        elif marker.stopped:
            self.incomplete[marker.kind] = ListingIncompleteError(marker.kind, marker.listed)
            logger.warning(
                f"Listing of {marker.kind} stopped after {marker.listed} resource(s); "
                "the report is incomplete for this kind"
            )
        else:
            logger.debug(f"Listed {marker.listed} {marker.kind}")

    @staticmethod
    def _drain(channel: "queue.Queue[object]") -> None:
        while True:
            try:
                channel.get_nowait()
            except queue.Empty:
                return
