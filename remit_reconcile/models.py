from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import date, datetime
from enum import StrEnum
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

import numpy as np
import pandas as pd


class CellKind(StrEnum):
    EMPTY = "empty"
    NUMBER = "number"
    TEXT = "text"
    BOOLEAN = "boolean"
    DATETIME = "datetime"


@dataclass(frozen=True)
class Cell:
    """One decoded spreadsheet value, tagged with the type it was decoded as."""

    kind: CellKind
    value: Any = None

    @classmethod
    def empty(cls) -> "Cell":
        return cls(CellKind.EMPTY)

    @classmethod
    def number(cls, value: float) -> "Cell":
        return cls(CellKind.NUMBER, float(value))

    @classmethod
    def text(cls, value: str) -> "Cell":
        return cls(CellKind.TEXT, value)

    @classmethod
    def boolean(cls, value: bool) -> "Cell":
        return cls(CellKind.BOOLEAN, bool(value))

    @classmethod
    def timestamp(cls, value: datetime) -> "Cell":
        return cls(CellKind.DATETIME, value)

    @classmethod
    def of(cls, value: Any) -> "Cell":
        """Classify a decoded Python value, e.g. ``Cell.of("")`` -> empty, ``Cell.of(7)`` -> number 7.0."""
        if isinstance(value, Cell):
            return value
        if value is None or (isinstance(value, str) and value == ""):
            return cls.empty()
        if isinstance(value, bool):
            return cls.boolean(value)
        if isinstance(value, (int, float)):
            if isinstance(value, float) and math.isnan(value):
                return cls.empty()
            return cls.number(value)
        if value is pd.NaT:
            return cls.empty()
        if isinstance(value, pd.Timestamp):
            return cls.timestamp(value.to_pydatetime())
        if isinstance(value, datetime):
            return cls.timestamp(value)
        if isinstance(value, date):
            return cls.timestamp(datetime(value.year, value.month, value.day))
        if isinstance(value, np.datetime64):
            return cls.of(pd.Timestamp(value))
        if isinstance(value, np.generic):
            # numpy scalars coming out of pandas frames
            return cls.of(value.item())
        return cls.text(str(value))

    @property
    def is_empty(self) -> bool:
        return self.kind is CellKind.EMPTY

    def label(self) -> str:
        """Render the cell as a column label, e.g. number 2024.0 -> "2024"."""
        if self.kind is CellKind.EMPTY:
            return ""
        if self.kind is CellKind.NUMBER:
            if self.value.is_integer():
                return str(int(self.value))
            return str(self.value)
        if self.kind is CellKind.BOOLEAN:
            return "true" if self.value else "false"
        if self.kind is CellKind.DATETIME:
            return self.value.isoformat()
        return str(self.value)

    def to_python(self) -> Any:
        if self.kind is CellKind.EMPTY:
            return ""
        return self.value


class Grid:
    """Rectangular view over the decoded rows of one worksheet."""

    def __init__(self, rows: Iterable[Sequence[Cell]]) -> None:
        self._rows: Tuple[Tuple[Cell, ...], ...] = tuple(tuple(row) for row in rows)
        self.width = max((len(row) for row in self._rows), default=0)

    @classmethod
    def from_values(cls, rows: Iterable[Sequence[Any]]) -> "Grid":
        return cls([Cell.of(value) for value in row] for row in rows)

    def __len__(self) -> int:
        return len(self._rows)

    def row(self, index: int) -> Tuple[Cell, ...]:
        """Return row ``index`` padded with empty cells up to the grid width."""
        row = self._rows[index]
        if len(row) < self.width:
            return row + (Cell.empty(),) * (self.width - len(row))
        return row


@dataclass(frozen=True)
class Record:
    """Ordered label/value pairs materialized from one grid row."""

    fields: Tuple[Tuple[str, Cell], ...] = ()

    @classmethod
    def from_pairs(cls, pairs: Iterable[Tuple[str, Any]]) -> "Record":
        # Later duplicates overwrite the value but keep the first position.
        ordered: Dict[str, Cell] = {}
        for label, value in pairs:
            ordered[label] = Cell.of(value)
        return cls(tuple(ordered.items()))

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, Any]) -> "Record":
        return cls.from_pairs(mapping.items())

    def labels(self) -> List[str]:
        return [label for label, _ in self.fields]

    def get(self, label: str) -> Optional[Cell]:
        """Return the cell stored under ``label`` or None when the record has no such field."""
        for key, value in self.fields:
            if key == label:
                return value
        return None

    def position(self, predicate: Callable[[str], bool]) -> int:
        for index, (label, _) in enumerate(self.fields):
            if predicate(label):
                return index
        return -1

    def insert_after(self, position: int, pairs: Iterable[Tuple[str, Any]]) -> "Record":
        new_fields = tuple((label, Cell.of(value)) for label, value in pairs)
        head = self.fields[: position + 1]
        tail = self.fields[position + 1 :]
        return Record(head + new_fields + tail)

    def to_dict(self) -> Dict[str, Any]:
        return {label: value.to_python() for label, value in self.fields}


def materialize_records(grid: Grid, header_index: int) -> List[Record]:
    """Turn every non-empty row below ``header_index`` into a Record keyed by the header labels."""
    if len(grid) == 0 or header_index >= len(grid):
        return []
    header = grid.row(header_index)
    columns = [(index, cell.label()) for index, cell in enumerate(header) if not cell.is_empty]

    records: List[Record] = []
    for row_index in range(header_index + 1, len(grid)):
        row = grid.row(row_index)
        cells = [(label, row[index]) for index, label in columns]
        if all(cell.is_empty for _, cell in cells):
            continue
        records.append(Record.from_pairs(cells))
    return records


@dataclass
class ReconciliationResult:
    matched: List[Record] = field(default_factory=list)
    unmatched: List[Record] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.matched) + len(self.unmatched)
