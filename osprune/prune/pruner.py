"""Resource pruner.

Consumes the merged resource stream, applies the staleness predicates and,
outside dry-run mode, deletes what is left.
"""

from __future__ import annotations

import logging
import threading
from datetime import datetime, timezone
from typing import Iterable, Optional, Sequence

from ..models.report import RunReport
from ..models.resource import Resource
from .filters import Predicate, filter_resources

logger = logging.getLogger(__name__)


class ResourcePruner:
    """Pruning consumption loop.

    Every resource passing all predicates is recorded as found. In live mode
    it is then deleted; a failure is recorded and the loop moves on to the
    next resource. Failed cascades are not retried.

    Attributes:
        predicates: Ordered staleness predicates
        dry_run: Only record found resources
        stop_event: When set, no further deletion is started
    """

    def __init__(
        self,
        predicates: Sequence[Predicate],
        dry_run: bool = True,
        stop_event: Optional[threading.Event] = None,
    ) -> None:
        """Initialize resource pruner.

        Args:
            predicates: Ordered staleness predicates
            dry_run: Only record found resources (default: True)
            stop_event: Abort signal supplied by the caller (optional)
        """
        self.predicates = list(predicates)
        self.dry_run = dry_run
        self.stop_event = stop_event or threading.Event()

    def run(self, resources: Iterable[Resource], started_at: Optional[datetime] = None) -> RunReport:
        """Run one pruning pass.

        Args:
            resources: Merged resource stream
            started_at: Report timestamp (default: now)

        Returns:
            RunReport with found, deleted and failed resources
        """
        report = RunReport(timestamp=started_at or datetime.now(timezone.utc))

        stream = filter_resources(resources, *self.predicates)
        try:
            for resource in stream:
                if self.stop_event.is_set():
                    logger.warning("Stop requested, no further resources will be processed")
                    break

                report.add_found(resource)

                if self.dry_run:
                    logger.debug(f"Found stale {resource}")
                    continue

                self.prune(resource, report)
        finally:
            stream.close()

        return report

    def prune(self, resource: Resource, report: RunReport) -> bool:
        """Delete a single resource and record the outcome.

        Args:
            resource: Stale resource to delete
            report: Report receiving the outcome

        Returns:
            True if the resource was deleted
        """
        logger.info(f"Deleting {resource} (created at {resource.timestamp.isoformat()})...")
        try:
            resource.delete()
        except Exception as e:
            logger.error(f"Error deleting {resource}: {e}")
            report.add_failed_to_delete(resource, e)
            return False

        logger.info(f"Deleted {resource}")
        report.add_deleted(resource)
        return True
