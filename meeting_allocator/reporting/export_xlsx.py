# meeting_allocator/reporting/export_xlsx.py
from __future__ import annotations

from pathlib import Path
from typing import Mapping

import pandas as pd
from openpyxl.styles import Alignment
from openpyxl.utils import get_column_letter

MAX_COLUMN_WIDTH = 60


def _format_sheet(ws, df: pd.DataFrame) -> None:
    """Wrap multi-line cells, size columns to their longest line and freeze the header."""
    ws.freeze_panes = "A2"
    for idx, column in enumerate(df.columns, start=1):
        lines = [str(column)]
        for v in df[column].tolist():
            lines.extend(str(v).splitlines() or [""])
        ws.column_dimensions[get_column_letter(idx)].width = min(
            MAX_COLUMN_WIDTH, max(len(line) for line in lines) + 2
        )
    for row in ws.iter_rows(min_row=2):
        for cell in row:
            if isinstance(cell.value, str) and "\n" in cell.value:
                cell.alignment = Alignment(wrap_text=True, vertical="top")


def export_result_xlsx(out_path: str, sheets: Mapping[str, pd.DataFrame]) -> str:
    """One sheet per entry, in mapping order. The print view is expected under "result"."""
    Path(out_path).parent.mkdir(parents=True, exist_ok=True)
    with pd.ExcelWriter(out_path, engine="openpyxl") as w:
        for name, df in sheets.items():
            df.to_excel(w, sheet_name=name, index=False)
            _format_sheet(w.sheets[name], df)
    return out_path
