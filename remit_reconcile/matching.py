from __future__ import annotations

from typing import FrozenSet, Hashable, Iterable, List, Optional, Sequence, Tuple

from .aggregate import AggregateTable
from .events import EventSink, emit
from .models import ReconciliationResult, Record
from .schema import AMT_FIELD, REJECTED_AMOUNT_FIELD, REMIT_AMT_FIELD
from .utils import parse_amount, round_half_up


def collect_identifiers(records: Iterable[Record], id_field: Optional[str]) -> FrozenSet[Hashable]:
    return frozenset(_identifier(record, id_field) for record in records)


def partition_records(
    records: Sequence[Record],
    identifiers: FrozenSet[Hashable],
    id_field: Optional[str],
) -> Tuple[List[Record], List[Record]]:
    """Split target records by exact identifier membership, keeping their original order.

    Matching is type-sensitive: number 7 never matches text "7".
    """
    matched: List[Record] = []
    unmatched: List[Record] = []
    for record in records:
        if _identifier(record, id_field) in identifiers:
            matched.append(record)
        else:
            unmatched.append(record)
    return matched, unmatched


def enrich_record(record: Record, id_field: Optional[str], aggregates: AggregateTable) -> Record:
    """Insert "Remit Amt" and "Rejected Amount" right after the record's amt column.

    The column is located case-insensitively, but the original amount is read from the
    literal "Amt" key; an "AMT" column therefore gets enriched with an original amount of 0.
    Records without any amt column are returned unchanged.
    """
    position = record.position(lambda label: label.lower() == "amt")
    if position < 0:
        return record

    remit_amt = aggregates.total_for(_identifier(record, id_field))
    original_amt = parse_amount(record.get(AMT_FIELD))
    rejected = round_half_up(original_amt - remit_amt)
    return record.insert_after(position, [(REMIT_AMT_FIELD, remit_amt), (REJECTED_AMOUNT_FIELD, rejected)])


def reconcile_records(
    source_records: Sequence[Record],
    target_records: Sequence[Record],
    source_id_field: Optional[str],
    target_id_field: Optional[str],
    aggregates: AggregateTable,
    sink: Optional[EventSink] = None,
) -> ReconciliationResult:
    identifiers = collect_identifiers(source_records, source_id_field)
    emit(sink, "source-identifiers", unique=len(identifiers))

    matched, unmatched = partition_records(target_records, identifiers, target_id_field)
    emit(sink, "partition", matched=len(matched), unmatched=len(unmatched), total=len(target_records))

    enriched = [enrich_record(record, target_id_field, aggregates) for record in matched]
    return ReconciliationResult(matched=enriched, unmatched=unmatched)


def _identifier(record: Record, id_field: Optional[str]) -> Optional[Hashable]:
    if id_field is None:
        return None
    return record.get(id_field)
