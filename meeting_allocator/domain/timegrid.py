from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timedelta, tzinfo
from typing import Optional, Union

import pandas as pd
from dateutil import parser as date_parser
from dateutil import tz


@dataclass(frozen=True)
class Interval:
    """Half-open time range [start, end)."""
    start: datetime
    end: datetime

    def overlaps(self, other: "Interval") -> bool:
        return self.start < other.end and other.start < self.end


def meeting_interval(slot: datetime, duration_hours: float) -> Interval:
    return Interval(slot, slot + timedelta(hours=duration_hours))


def parse_instant(value: Union[str, datetime, date, pd.Timestamp], zone: Optional[tzinfo] = None) -> datetime:
    """
    Convert a workbook cell (ISO string, spreadsheet datetime or pandas Timestamp)
    into an aware datetime. Naive values are placed in `zone`.
    """
    if value is None or value is pd.NaT:
        raise ValueError("missing instant")
    if isinstance(value, pd.Timestamp):
        dt = value.to_pydatetime()
    elif isinstance(value, datetime):
        dt = value
    elif isinstance(value, date):
        dt = datetime(value.year, value.month, value.day)
    else:
        text = str(value).strip()
        if not text:
            raise ValueError("empty instant")
        dt = date_parser.isoparse(text)

    if dt.tzinfo is None and zone is not None:
        dt = dt.replace(tzinfo=zone)
    return dt


def get_zone(name: str) -> tzinfo:
    zone = tz.gettz(name)
    if zone is None:
        raise ValueError(f"unknown time zone: {name}")
    return zone
