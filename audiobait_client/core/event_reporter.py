"""
Submits operational events to the API server.
"""

import logging
from collections.abc import Iterable
from datetime import datetime

from audiobait_client.api.client import DeviceAPIClient
from audiobait_client.api.session import Session
from audiobait_client.models.events import EventReport

log = logging.getLogger(__name__)

EVENTS_PATH = "api/v1/events"


class EventReporter:
    def __init__(self, api_client: DeviceAPIClient):
        self._api_client = api_client

    async def report_event(
        self,
        session: Session,
        detail_json: bytes | str,
        occurrences: Iterable[datetime],
    ) -> None:
        """
        Reports an event that occurred at each of the given times.

        Invalid ``detail_json`` fails permanently before anything is sent.
        Transport failures are temporary; error statuses are permanent for
        4xx and temporary otherwise.
        """
        report = EventReport.from_json(detail_json, occurrences)
        await self.submit(session, report)

    async def submit(self, session: Session, report: EventReport) -> None:
        log.debug(f"Reporting event with {len(report.date_times)} occurrence(s)")
        await self._api_client.post_json(session, EVENTS_PATH, report.to_json())
