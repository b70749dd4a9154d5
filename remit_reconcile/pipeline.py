from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

from .aggregate import aggregate_amounts
from .columns import ColumnRoles, Role, identify_columns
from .events import EventSink, emit
from .header import locate_header_row
from .io_utils import load_grid, write_records
from .matching import collect_identifiers, reconcile_records
from .models import Grid, ReconciliationResult, Record, materialize_records
from .schema import HEADER_SCAN_ROWS, MATCHED_FILENAME, MATCHED_SHEET, UNMATCHED_FILENAME, UNMATCHED_SHEET


@dataclass
class ReconcileOptions:
    source_path: Path
    target_path: Path
    output_dir: Path = Path("output")
    dry_run: bool = False
    header_scan_rows: int = HEADER_SCAN_ROWS


@dataclass
class ReconcileResult:
    source_rows: int
    target_rows: int
    unique_source_ids: int
    matched: int
    unmatched: int
    source_roles: ColumnRoles
    target_roles: ColumnRoles
    matched_path: Optional[Path] = None
    unmatched_path: Optional[Path] = None


@dataclass
class GridReconciliation:
    """Outcome of running the core over two decoded grids."""

    result: ReconciliationResult
    source_records: List[Record]
    target_records: List[Record]
    source_roles: ColumnRoles
    target_roles: ColumnRoles


def load_records(
    grid: Grid,
    role: Role,
    header_scan_rows: int = HEADER_SCAN_ROWS,
    sink: Optional[EventSink] = None,
) -> tuple[List[Record], ColumnRoles]:
    header_index = locate_header_row(grid, max_rows=header_scan_rows, sink=sink)
    records = materialize_records(grid, header_index)
    # Roles are read off the materialized field names, so duplicate header labels collapse first.
    labels = records[0].labels() if records else []
    roles = identify_columns(labels, role)
    emit(
        sink,
        "columns",
        role=role.value,
        header_index=header_index,
        rows=len(records),
        labels=labels,
        id_field=roles.id_field,
        amount_field=roles.amount_field,
    )
    return records, roles


def reconcile_grids(
    source_grid: Grid,
    target_grid: Grid,
    header_scan_rows: int = HEADER_SCAN_ROWS,
    sink: Optional[EventSink] = None,
) -> GridReconciliation:
    """Run header detection, column identification, aggregation and matching over two grids."""
    source_records, source_roles = load_records(source_grid, Role.SOURCE, header_scan_rows, sink)
    target_records, target_roles = load_records(target_grid, Role.TARGET, header_scan_rows, sink)

    aggregates = aggregate_amounts(source_records, source_roles.id_field, source_roles.amount_field)
    result = reconcile_records(
        source_records,
        target_records,
        source_roles.id_field,
        target_roles.id_field,
        aggregates,
        sink=sink,
    )
    return GridReconciliation(
        result=result,
        source_records=source_records,
        target_records=target_records,
        source_roles=source_roles,
        target_roles=target_roles,
    )


def run(options: ReconcileOptions, sink: Optional[EventSink] = None) -> ReconcileResult:
    source_grid = load_grid(options.source_path)
    target_grid = load_grid(options.target_path)
    outcome = reconcile_grids(source_grid, target_grid, options.header_scan_rows, sink)
    result = outcome.result

    matched_path: Optional[Path] = None
    unmatched_path: Optional[Path] = None
    if not options.dry_run:
        # An empty partition produces no workbook.
        if result.matched:
            matched_path = options.output_dir / MATCHED_FILENAME
            write_records(result.matched, matched_path, MATCHED_SHEET)
        if result.unmatched:
            unmatched_path = options.output_dir / UNMATCHED_FILENAME
            write_records(result.unmatched, unmatched_path, UNMATCHED_SHEET)
        emit(sink, "written", matched_path=str(matched_path or ""), unmatched_path=str(unmatched_path or ""))

    unique_ids = len(collect_identifiers(outcome.source_records, outcome.source_roles.id_field))
    return ReconcileResult(
        source_rows=len(outcome.source_records),
        target_rows=len(outcome.target_records),
        unique_source_ids=unique_ids,
        matched=len(result.matched),
        unmatched=len(result.unmatched),
        source_roles=outcome.source_roles,
        target_roles=outcome.target_roles,
        matched_path=matched_path,
        unmatched_path=unmatched_path,
    )
