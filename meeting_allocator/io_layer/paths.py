from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class InputPaths:
    """
    One workbook holds the whole catalog, one sheet per collection.
    workbook: source xlsx
    report_file: optional tabular report xlsx to write
    """
    workbook: str
    report_file: Optional[str] = None

    # sheet names (change here if the workbook layout changes)
    slots_sheet: str = "slots"
    locations_sheet: str = "locations"
    orders_sheet: str = "orders"
    meetings_sheet: str = "meetings"
    principals_sheet: str = "principals"
    prefilled_sheet: str = "prefilled"
    unavailables_sheet: str = "unavailables"
