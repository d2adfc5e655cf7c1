"""
Model for an event report: caller supplied details merged with the times at
which the event occurred.
"""

import json
import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

from audiobait_client.exceptions import OperationError

log = logging.getLogger(__name__)

DATE_TIMES_KEY = "dateTimes"


def _reject_constant(name: str) -> Any:
    raise ValueError(f"{name} is not valid JSON")


def format_timestamp(moment: datetime) -> str:
    """
    Formats a timestamp as UTC RFC3339 text with second precision.

    Naive datetimes are taken to already be in UTC.
    """
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


@dataclass
class EventReport:
    """An event detail mapping together with its occurrence timestamps."""

    details: dict[str, Any]
    date_times: list[str] = field(default_factory=list)

    @classmethod
    def from_json(
        cls, detail_json: bytes | str, occurrences: Iterable[datetime]
    ) -> "EventReport":
        """
        Builds a report from raw JSON details.

        Raises:
            OperationError: (permanent) if the details are not a JSON object.
        """
        try:
            details = json.loads(detail_json, parse_constant=_reject_constant)
        except (TypeError, ValueError) as e:
            raise OperationError(f"invalid event details: {e}") from e
        if not isinstance(details, dict):
            raise OperationError(
                "invalid event details: expected a JSON object, "
                f"got {type(details).__name__}"
            )
        return cls(
            details=details,
            date_times=[format_timestamp(t) for t in occurrences],
        )

    def to_payload(self) -> dict[str, Any]:
        """Returns the details with the occurrence times under 'dateTimes'."""
        if DATE_TIMES_KEY in self.details:
            log.warning(
                f"Event details already contain '{DATE_TIMES_KEY}'; overwriting it."
            )
        return {**self.details, DATE_TIMES_KEY: list(self.date_times)}

    def to_json(self) -> bytes:
        try:
            body = json.dumps(
                self.to_payload(), separators=(",", ":"), allow_nan=False
            )
        except (TypeError, ValueError) as e:
            raise OperationError(f"invalid event details: {e}") from e
        return body.encode("utf-8")
