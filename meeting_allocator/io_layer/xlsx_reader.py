# meeting_allocator/io_layer/xlsx_reader.py
from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import datetime
from typing import Any, List, Tuple

import pandas as pd
from openpyxl import load_workbook

from meeting_allocator.config import AppConfig
from meeting_allocator.domain.models import (
    InputData, Meeting, PrefilledConstraint, PrincipalRoster, UnavailabilityEntry,
)
from meeting_allocator.domain.timegrid import get_zone, parse_instant
from meeting_allocator.io_layer.paths import InputPaths

LIST_SEPARATOR = re.compile(r",|\n")
NAME_SEPARATOR = re.compile(r",\s*|\n")


def _is_blank(v: Any) -> bool:
    if isinstance(v, str):
        return not v.strip()
    # None, NaN and NaT (blank cells in a datetime column)
    return v is None or (pd.api.types.is_scalar(v) and pd.isna(v))


def _text(v: Any) -> str:
    return "" if _is_blank(v) else str(v).strip()


def split_list(v: Any, pattern: re.Pattern = LIST_SEPARATOR) -> Tuple[str, ...]:
    """'a,b\\nc' -> ('a', 'b', 'c'); empty pieces are dropped."""
    if _is_blank(v):
        return ()
    return tuple(x.strip() for x in pattern.split(str(v)) if x.strip())


def _require_columns(df: pd.DataFrame, columns: List[str], where: str) -> None:
    for c in columns:
        if c not in df.columns:
            raise ValueError(f"{where} is missing column {c}")


@dataclass(frozen=True)
class XlsxReader:
    cfg: AppConfig

    @property
    def zone(self):
        return get_zone(self.cfg.timezone_name)

    def instant(self, v: Any) -> datetime:
        return parse_instant(v, self.zone)

    def _sheet_names(self, path: str) -> List[str]:
        wb = load_workbook(path, read_only=True)
        try:
            return list(wb.sheetnames)
        finally:
            wb.close()

    def read_column(self, path: str, sheet: str) -> List[Any]:
        """Column A below the header row."""
        df = pd.read_excel(path, sheet_name=sheet, usecols=[0])
        return [v for v in df.iloc[:, 0].tolist() if not _is_blank(v)]

    def read_slots(self, path: str, sheet: str) -> List[datetime]:
        return [self.instant(v) for v in self.read_column(path, sheet)]

    def read_meetings(self, path: str, sheet: str) -> List[Meeting]:
        """
        Columns: name, cname, pics, members, duration, location, remark
        pics/members are comma or newline separated.
        """
        df = pd.read_excel(path, sheet_name=sheet)
        _require_columns(df, ["name", "duration"], f"{path}:{sheet}")

        out: List[Meeting] = []
        for _, row in df.iterrows():
            name = _text(row.get("name"))
            if not name:
                continue
            try:
                duration = float(row["duration"])
                if pd.isna(duration):
                    raise ValueError
            except (TypeError, ValueError):
                raise ValueError(f"{path}:{sheet} meeting {name} has an invalid duration: {row['duration']!r}")
            out.append(Meeting(
                name=name,
                label=_text(row.get("cname")),
                duration=duration,
                members=split_list(row.get("members")),
                pics=split_list(row.get("pics")),
                location=_text(row.get("location")) or None,
                remark=_text(row.get("remark")),
            ))
        return out

    def read_principals(self, path: str, sheet: str) -> List[PrincipalRoster]:
        df = pd.read_excel(path, sheet_name=sheet)
        _require_columns(df, ["name", "meetings"], f"{path}:{sheet}")
        return [
            PrincipalRoster(name=_text(row["name"]), meetings=split_list(row["meetings"]))
            for _, row in df.iterrows()
            if _text(row["name"])
        ]

    def read_prefilled(self, path: str, sheet: str) -> List[PrefilledConstraint]:
        df = pd.read_excel(path, sheet_name=sheet)
        _require_columns(df, ["name"], f"{path}:{sheet}")
        out = []
        for _, row in df.iterrows():
            name = _text(row["name"])
            if not name:
                continue
            slot = row.get("slot")
            try:
                instant = None if _is_blank(slot) else self.instant(slot)
            except (TypeError, ValueError):
                raise ValueError(f"{path}:{sheet} prefilled {name} has an invalid slot: {slot!r}")
            out.append(PrefilledConstraint(
                name=name,
                slot=instant,
                location=_text(row.get("location")) or None,
            ))
        return out

    def parse_intervals(self, v: Any) -> Tuple[Tuple[datetime, datetime], ...]:
        """'start/end,start/end' with spaces ignored."""
        if _is_blank(v):
            return ()
        out = []
        for piece in split_list(str(v).replace(" ", "")):
            if "/" not in piece:
                raise ValueError(f"Unavailable interval must be 'start/end': {piece}")
            start, end = piece.split("/", 1)
            out.append((self.instant(start), self.instant(end)))
        return tuple(out)

    def read_unavailables(self, path: str, sheet: str) -> List[UnavailabilityEntry]:
        """Columns: teachers, slots, remark, ignoredMeeting (compact form)."""
        df = pd.read_excel(path, sheet_name=sheet)
        _require_columns(df, ["teachers", "slots"], f"{path}:{sheet}")
        out = []
        for _, row in df.iterrows():
            participants = split_list(row["teachers"], NAME_SEPARATOR)
            if not participants:
                continue
            out.append(UnavailabilityEntry(
                participants=participants,
                intervals=self.parse_intervals(row["slots"]),
                remark=_text(row.get("remark")),
                ignored_meeting=_text(row.get("ignoredMeeting")) or None,
            ))
        return out

    def build_input_data(self, paths: InputPaths) -> InputData:
        path = paths.workbook
        sheets = self._sheet_names(path)
        for required in (paths.slots_sheet, paths.locations_sheet, paths.meetings_sheet):
            if required not in sheets:
                raise ValueError(f"{path} has no '{required}' sheet")

        def optional(sheet: str, reader, default):
            return reader(path, sheet) if sheet in sheets else default

        return InputData(
            slots=self.read_slots(path, paths.slots_sheet),
            locations=[_text(v) for v in self.read_column(path, paths.locations_sheet)],
            orders=optional(paths.orders_sheet, lambda p, s: [_text(v) for v in self.read_column(p, s)], []),
            meetings=self.read_meetings(path, paths.meetings_sheet),
            principal_rosters=optional(paths.principals_sheet, self.read_principals, []),
            prefilled=optional(paths.prefilled_sheet, self.read_prefilled, []),
            unavailability_entries=optional(paths.unavailables_sheet, self.read_unavailables, []),
        )

