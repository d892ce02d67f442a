# meeting_allocator/reporting/report.py
from __future__ import annotations

from typing import Dict, List, Sequence

import pandas as pd

from meeting_allocator.domain.models import Assignment, Meeting

VIEW_COLUMNS = ["Date", "Time", "Venue", "Department/Committee/Team", "Principals", "PICs", "Members"]


def _date_label(a: Assignment) -> str:
    s = a.slot
    return f"{s.day}/{s.month}({s.strftime('%a')})"


def _time_label(a: Assignment) -> str:
    iv = a.interval
    return f"{iv.start.strftime('%H:%M')}-{iv.end.strftime('%H:%M')}"


def build_print_view(assignments: Sequence[Assignment]) -> pd.DataFrame:
    """
    One row per assignment, in slot order. A date or time equal to the row
    above is left blank so the sheet reads as a grouped timetable.
    """
    rows = []
    current_date = ""
    current_time = ""
    for a in assignments:
        m = a.meeting
        date_label = _date_label(a)
        time_label = _time_label(a)
        title = f"{m.label}\n{m.name}" + (f"\n({m.remark})" if m.remark else "")
        rows.append({
            "Date": "" if date_label == current_date else date_label,
            "Time": "" if time_label == current_time else time_label,
            "Venue": a.location or "",
            "Department/Committee/Team": title,
            "Principals": ", ".join(m.principals),
            "PICs": ", ".join(m.pics),
            "Members": ", ".join(m.members),
        })
        current_date = date_label
        current_time = time_label
    return pd.DataFrame(rows, columns=VIEW_COLUMNS)


def build_unassigned_table(unassigned: Sequence[Meeting]) -> pd.DataFrame:
    rows = []
    for m in unassigned:
        scores = m.scores
        rows.append(dict(
            name=m.name,
            label=m.label,
            rank=scores.rank if scores else None,
            participants=", ".join(m.participants),
            valid_slot_count=scores.valid_slot_count if scores else None,
        ))
    df = pd.DataFrame(rows, columns=["name", "label", "rank", "participants", "valid_slot_count"])
    if not df.empty:
        df = df.sort_values(["rank", "name"]).reset_index(drop=True)
    return df


def build_person_summary(assignments: Sequence[Assignment]) -> pd.DataFrame:
    counts: Dict[str, Dict[str, float]] = {}
    for a in assignments:
        for p in a.meeting.participants:
            d = counts.setdefault(p, dict(meetings=0, hours=0.0))
            d["meetings"] += 1
            d["hours"] += a.meeting.duration

    rows: List[dict] = [
        dict(person_name=p, meeting_count=int(d["meetings"]), total_hours=d["hours"])
        for p, d in counts.items()
    ]
    df = pd.DataFrame(rows, columns=["person_name", "meeting_count", "total_hours"])
    if not df.empty:
        df = df.sort_values(["meeting_count", "person_name"], ascending=[False, True]).reset_index(drop=True)
    return df
