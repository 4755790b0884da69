from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time
from typing import Literal

import pytz

TemporalKind = Literal["dateTime", "date", "time"]


@dataclass(frozen=True)
class TemporalValue:
    """A date/time field value carrying the raw ISO-8601 string it was read from.

    Parsing is deferred: the string is kept exactly as stored and only
    interpreted when one of the ``to_*`` accessors is called.
    """

    iso8601_string: str
    kind: TemporalKind = "dateTime"

    def __str__(self) -> str:
        return self.iso8601_string

    def to_datetime(self) -> datetime:
        """Parse as a timezone-aware datetime normalized to UTC.

        A trailing ``Z`` is accepted; a value without an offset is taken as UTC.

        Raises:
            ValueError: If the string is not an ISO-8601 datetime.
        """
        parsed = datetime.fromisoformat(_normalize_zulu(self.iso8601_string))
        if parsed.tzinfo is None:
            return pytz.utc.localize(parsed)
        return parsed.astimezone(pytz.utc)

    def to_date(self) -> date:
        if self.kind == "date":
            return date.fromisoformat(self.iso8601_string[:10])
        return self.to_datetime().date()

    def to_time(self) -> time:
        if self.kind == "time":
            return time.fromisoformat(_normalize_zulu(self.iso8601_string))
        return self.to_datetime().timetz()


def _normalize_zulu(value: str) -> str:
    if value.endswith(("Z", "z")):
        return value[:-1] + "+00:00"
    return value
