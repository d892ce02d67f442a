from datetime import datetime, timedelta

import pytest
from dateutil import tz

from meeting_allocator.domain.models import Meeting, ScheduleContext, Unavailability
from meeting_allocator.preprocessing.preprocess import attach_scores

HKT = tz.gettz("Asia/Hong_Kong")
BASE = datetime(2023, 10, 23, 15, 30, tzinfo=HKT)


def at(hours: float) -> datetime:
    """Instant `hours` after the base slot."""
    return BASE + timedelta(hours=hours)


def meeting(name, *participants, duration=1, location=None, members=None, principals=(), pics=None):
    if members is None and pics is None:
        members = participants
    return Meeting(
        name=name,
        label=name.upper(),
        duration=duration,
        members=tuple(members or ()),
        principals=tuple(principals),
        pics=tuple(pics or ()),
        location=location,
    )


def busy(participant, start_h, end_h, ignored=None):
    return Unavailability(participant=participant, start=at(start_h), end=at(end_h), ignored_meeting=ignored)


def index(*records):
    out = {}
    for r in records:
        out.setdefault(r.participant, []).append(r)
    return out


def make_context(meetings, slots, unavailability=None, prefilled=(), locations=("G01", "G02", "G10"), orders=()):
    unavailability = unavailability or {}
    scored = attach_scores(meetings, slots, unavailability, list(orders))
    return ScheduleContext(
        meetings=tuple(scored),
        prefilled=tuple(prefilled),
        unavailability=unavailability,
        slots=tuple(slots),
        locations=tuple(locations),
    )


@pytest.fixture
def two_slots():
    return [at(0), at(1)]
