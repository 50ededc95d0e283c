"""Slack notification of resources that failed to delete."""

from __future__ import annotations

import logging
from typing import Optional

import requests

from ..errors import NotificationError
from ..models.report import RunReport

logger = logging.getLogger(__name__)

ACCEPTED_STATUS_CODES = (200, 202, 204)
REQUEST_TIMEOUT = 30


def build_message(report: RunReport, cluster_label: Optional[str] = None) -> str:
    """Build the plain-text notification body.

    Args:
        report: Run report
        cluster_label: Label identifying the cluster or job (optional)

    Returns:
        One ``stale <type>: "<id>"`` line per failed resource
    """
    lines = []
    if cluster_label:
        lines.append(f"Cluster {cluster_label}")
    for entry in report.failed_to_delete:
        lines.append(f'stale {entry.resource_type}: "{entry.resource_id}"')
    return "".join(f"{line}\n" for line in lines)


def notify_slack(
    hook: str,
    report: RunReport,
    cluster_label: Optional[str] = None,
    session: Optional[requests.Session] = None,
) -> None:
    """Post the failed resources to a Slack incoming webhook.

    Args:
        hook: Slack webhook URL
        report: Run report
        cluster_label: Label identifying the cluster or job (optional)
        session: requests session to use (optional)

    Raises:
        NotificationError: If the request fails or returns an unexpected status
    """
    payload = {"text": build_message(report, cluster_label)}
    http = session or requests.Session()

    try:
        response = http.post(hook, json=payload, timeout=REQUEST_TIMEOUT)
    except requests.exceptions.RequestException as e:
        raise NotificationError(f"failed to send a message to Slack: {e}") from e

    if response.status_code not in ACCEPTED_STATUS_CODES:
        raise NotificationError(
            f"unexpected status code {response.status_code} while sending a Slack notification"
        )

    logger.info(f"Reported {len(report.failed_to_delete)} resource(s) that failed to delete to Slack")
