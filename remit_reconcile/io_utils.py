from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, List, Sequence

import pandas as pd
from openpyxl.styles import Font, PatternFill
from openpyxl.utils import get_column_letter
from openpyxl.worksheet.worksheet import Worksheet

from .models import CellKind, Grid, Record
from .schema import (
    AMT_FIELD,
    HEADER_FILL,
    MAX_COLUMN_WIDTH,
    REMIT_AMT_FIELD,
    REMIT_LOW_FILL,
    REMIT_LOW_RATIO,
    REMIT_OK_FILL,
    SUPPORTED_CSV_SUFFIXES,
    SUPPORTED_EXCEL_SUFFIXES,
)
from .time_utils import format_excel_date
from .utils import parse_amount


def load_grid(path: Path) -> Grid:
    """Decode the first worksheet of ``path`` into a Grid of typed cells.

    Excel files keep the cell types openpyxl resolves (numbers, text, booleans, dates);
    CSV rows are read as text, e.g. "100" stays Text("100").
    """
    if not path.exists():
        raise FileNotFoundError(f"input workbook not found: {path}")
    suffix = path.suffix.lower()
    if suffix in SUPPORTED_EXCEL_SUFFIXES:
        frame = pd.read_excel(path, sheet_name=0, header=None)
        return frame_to_grid(frame)
    if suffix in SUPPORTED_CSV_SUFFIXES:
        return frame_to_grid(_read_ragged_csv(path))
    raise ValueError(f"unsupported input format: {path.name}")


def frame_to_grid(frame: pd.DataFrame) -> Grid:
    rows = frame.astype(object).values.tolist()
    return Grid.from_values(rows)


def _read_ragged_csv(path: Path) -> pd.DataFrame:
    """Read a CSV whose preamble rows are shorter than the table, e.g. a one-cell report title.

    Naming at least as many columns as the widest line keeps pandas from rejecting ragged rows;
    trailing columns that stay empty are dropped afterwards.
    """
    text = path.read_text(encoding="utf-8-sig")
    if not text.strip():
        return pd.DataFrame()
    # Quoted commas can only overcount the width.
    width = max(line.count(",") + 1 for line in text.splitlines())
    frame = pd.read_csv(
        path,
        header=None,
        names=range(width),
        dtype=str,
        keep_default_na=False,
        skip_blank_lines=False,
        encoding="utf-8-sig",
    )
    empty = frame.isna() | (frame == "")
    while len(frame.columns) and empty[frame.columns[-1]].all():
        frame = frame.drop(columns=frame.columns[-1])
    return frame


def records_to_frame(records: Sequence[Record]) -> pd.DataFrame:
    """Flatten records into a DataFrame; columns follow first appearance across records."""
    columns: List[str] = []
    seen = set()
    rows: List[Dict[str, Any]] = []
    for record in records:
        row: Dict[str, Any] = {}
        for label, cell in record.fields:
            if label not in seen:
                seen.add(label)
                columns.append(label)
            if cell.kind is CellKind.DATETIME:
                row[label] = format_excel_date(cell.value)
            else:
                row[label] = cell.to_python()
        rows.append(row)
    return pd.DataFrame(rows, columns=columns)


def write_records(records: Sequence[Record], output_path: Path, sheet_name: str) -> None:
    """Write records to a single-sheet workbook with the remit colour coding applied."""
    if not records:
        raise ValueError(f"no {sheet_name} data to write")
    frame = records_to_frame(records)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    with pd.ExcelWriter(output_path, engine="openpyxl") as writer:
        frame.to_excel(writer, sheet_name=sheet_name, index=False)
        worksheet = writer.sheets[sheet_name]
        _style_header(worksheet, len(frame.columns))
        _colour_remit_amounts(worksheet, frame)
        _fit_columns(worksheet, frame)


def _style_header(worksheet: Worksheet, column_count: int) -> None:
    fill = PatternFill(fill_type="solid", fgColor=HEADER_FILL)
    for column in range(1, column_count + 1):
        cell = worksheet.cell(row=1, column=column)
        cell.font = Font(bold=True)
        cell.fill = fill


def _colour_remit_amounts(worksheet: Worksheet, frame: pd.DataFrame) -> None:
    columns = list(frame.columns)
    if REMIT_AMT_FIELD not in columns or AMT_FIELD not in columns:
        return
    remit_column = columns.index(REMIT_AMT_FIELD) + 1
    low = PatternFill(fill_type="solid", fgColor=REMIT_LOW_FILL)
    ok = PatternFill(fill_type="solid", fgColor=REMIT_OK_FILL)
    for offset, (amt, remit) in enumerate(zip(frame[AMT_FIELD], frame[REMIT_AMT_FIELD])):
        cell = worksheet.cell(row=offset + 2, column=remit_column)  # row 1 is the header
        if parse_amount(_plain(remit)) < parse_amount(_plain(amt)) * REMIT_LOW_RATIO:
            cell.fill = low
        else:
            cell.fill = ok


def _fit_columns(worksheet: Worksheet, frame: pd.DataFrame) -> None:
    for index, column in enumerate(frame.columns, start=1):
        width = len(str(column)) if column else 10
        for value in frame[column]:
            value = _plain(value)
            if value:
                width = max(width, len(str(value)))
        worksheet.column_dimensions[get_column_letter(index)].width = min(width + 2, MAX_COLUMN_WIDTH)


def _plain(value: Any) -> Any:
    if value is None or (isinstance(value, float) and pd.isna(value)):
        return ""
    if hasattr(value, "item"):
        return value.item()
    return value
