from datetime import datetime

import pandas as pd
import pytest
from conftest import HKT
from openpyxl import Workbook

from meeting_allocator.config import DEFAULT_CONFIG
from meeting_allocator.domain.timegrid import parse_instant
from meeting_allocator.io_layer.paths import InputPaths
from meeting_allocator.io_layer.xlsx_reader import XlsxReader, split_list


def _sheet(wb, title, rows):
    ws = wb.create_sheet(title)
    for r in rows:
        ws.append(r)


def write_workbook(path, with_optional=True):
    wb = Workbook()
    wb.remove(wb.active)
    _sheet(wb, "slots", [["slot"], ["2023-10-23T15:30:00+08:00"], [datetime(2023, 10, 23, 16, 30)]])
    _sheet(wb, "locations", [["location"], ["G01"], ["G10"]])
    _sheet(wb, "meetings", [
        ["name", "cname", "pics", "members", "duration", "location", "remark"],
        ["Meeting A", "Mtg A", "TeacherA", "TeacherB,TeacherB\nTeacherC", 1, None, None],
        ["Meeting B", "Mtg B", None, "TeacherD", 1.5, "Hall", "bring laptops"],
    ])
    if with_optional:
        _sheet(wb, "orders", [["name"], ["Meeting B"]])
        _sheet(wb, "principals", [["name", "meetings"], ["Principal1", "Meeting A,\nMeeting B"]])
        _sheet(wb, "prefilled", [["name", "slot", "location"], ["Meeting A", "2023-10-23T15:30:00+08:00", "G01"],
                                 ["Meeting B", None, "G10"]])
        _sheet(wb, "unavailables", [
            ["teachers", "slots", "remark", "ignoredMeeting"],
            ["TeacherB, TeacherD", "2023-10-24T15:30:00+08:00/2023-10-24T16:30:00+08:00, "
                                   "2023-10-25T09:00:00+08:00/2023-10-25T10:00:00+08:00", "trip", "Meeting A"],
        ])
    wb.save(path)


def test_split_list():
    assert split_list("a,b\nc,,") == ("a", "b", "c")
    assert split_list(None) == ()
    assert split_list(float("nan")) == ()


def test_build_input_data(tmp_path):
    path = tmp_path / "catalog.xlsx"
    write_workbook(path)
    data = XlsxReader(cfg=DEFAULT_CONFIG).build_input_data(InputPaths(workbook=str(path)))

    assert data.slots[0] == datetime(2023, 10, 23, 15, 30, tzinfo=HKT)
    # naive spreadsheet datetimes get the configured zone
    assert data.slots[1].tzinfo is not None
    assert data.slots[1].utcoffset().total_seconds() == 8 * 3600
    assert data.locations == ["G01", "G10"]
    assert data.orders == ["Meeting B"]

    a, b = data.meetings
    assert a.members == ("TeacherB", "TeacherB", "TeacherC")
    assert a.pics == ("TeacherA",)
    assert a.location is None
    assert b.duration == 1.5
    assert (b.location, b.remark) == ("Hall", "bring laptops")

    assert data.principal_rosters[0].meetings == ("Meeting A", "Meeting B")
    assert data.prefilled[0].slot == data.slots[0]
    assert data.prefilled[1].slot is None
    assert data.prefilled[1].location == "G10"

    entry = data.unavailability_entries[0]
    assert entry.participants == ("TeacherB", "TeacherD")
    assert len(entry.intervals) == 2
    assert entry.ignored_meeting == "Meeting A"


def test_optional_sheets_default_to_empty(tmp_path):
    path = tmp_path / "minimal.xlsx"
    write_workbook(path, with_optional=False)
    data = XlsxReader(cfg=DEFAULT_CONFIG).build_input_data(InputPaths(workbook=str(path)))
    assert data.orders == [] and data.prefilled == [] and data.unavailability_entries == []


def test_missing_required_sheet(tmp_path):
    wb = Workbook()
    wb.active.title = "slots"
    path = tmp_path / "bad.xlsx"
    wb.save(path)
    with pytest.raises(ValueError, match="locations"):
        XlsxReader(cfg=DEFAULT_CONFIG).build_input_data(InputPaths(workbook=str(path)))


def write_prefilled_workbook(path, rows):
    wb = Workbook()
    wb.remove(wb.active)
    _sheet(wb, "slots", [["slot"], [datetime(2023, 10, 23, 15, 30)]])
    _sheet(wb, "locations", [["location"], ["G01"], ["G10"]])
    _sheet(wb, "meetings", [["name", "duration"], ["A", 1], ["B", 1]])
    _sheet(wb, "prefilled", [["name", "slot", "location"]] + rows)
    wb.save(path)


def test_blank_cell_in_datetime_slot_column_is_location_only(tmp_path):
    path = tmp_path / "prefilled.xlsx"
    write_prefilled_workbook(path, [["A", datetime(2023, 10, 23, 15, 30), None], ["B", None, "G10"]])
    data = XlsxReader(cfg=DEFAULT_CONFIG).build_input_data(InputPaths(workbook=str(path)))
    a, b = data.prefilled
    assert a.slot == datetime(2023, 10, 23, 15, 30, tzinfo=HKT)
    assert a.location is None
    assert b.slot is None
    assert b.location == "G10"


def test_malformed_prefilled_slot_is_rejected(tmp_path):
    path = tmp_path / "prefilled.xlsx"
    write_prefilled_workbook(path, [["A", "next monday", None]])
    with pytest.raises(ValueError, match="prefilled A has an invalid slot"):
        XlsxReader(cfg=DEFAULT_CONFIG).build_input_data(InputPaths(workbook=str(path)))


def test_missing_instants_are_rejected():
    assert split_list(pd.NaT) == ()
    for value in (pd.NaT, None, ""):
        with pytest.raises(ValueError):
            parse_instant(value, HKT)
