from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Hashable, Iterable, List, Optional

from .models import Record
from .utils import parse_amount


@dataclass
class AggregateTable:
    """Per-identifier remittance amounts, keyed by the identifier cell as decoded (None when absent)."""

    counts: Dict[Hashable, int] = field(default_factory=dict)
    amounts: Dict[Hashable, List[float]] = field(default_factory=dict)
    totals: Dict[Hashable, float] = field(default_factory=dict)

    def add(self, identifier: Hashable, amount: float) -> None:
        self.counts[identifier] = self.counts.get(identifier, 0) + 1
        self.amounts.setdefault(identifier, []).append(amount)
        self.totals[identifier] = self.totals.get(identifier, 0.0) + amount

    def total_for(self, identifier: Hashable) -> float:
        return self.totals.get(identifier, 0.0)

    def __len__(self) -> int:
        return len(self.totals)


def aggregate_amounts(records: Iterable[Record], id_field: Optional[str], amount_field: Optional[str]) -> AggregateTable:
    """Sum source amounts per identifier, e.g. A: 10, 20.5, "30.25 USD" -> totals[A] == 60.75."""
    table = AggregateTable()
    for record in records:
        identifier = record.get(id_field) if id_field is not None else None
        amount = parse_amount(record.get(amount_field)) if amount_field is not None else 0.0
        table.add(identifier, amount)
    return table
