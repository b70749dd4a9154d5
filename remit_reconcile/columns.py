from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import Optional, Sequence

from .schema import TARGET_ID_FALLBACK


class Role(StrEnum):
    SOURCE = "source"  # remittance ledger carrying the paid amounts
    TARGET = "target"  # submission ledger being annotated


@dataclass(frozen=True)
class ColumnRoles:
    id_field: Optional[str]
    amount_field: Optional[str] = None


def identify_columns(labels: Sequence[str], role: Role) -> ColumnRoles:
    """Choose the identifier (and, for the source, amount) column from header labels.

    Source: amount is the first label equal to "amt"/"amount" or containing "amount";
    identifier is the first "id"/"billno" label, else the first label.
    Target: identifier is the first label containing "claim" or equal to "id", else "Claim ID"
    even when no such column exists.
    """
    if role is Role.SOURCE:
        amount_field = _first(labels, lambda lowered: lowered in ("amt", "amount") or "amount" in lowered)
        id_field = _first(labels, lambda lowered: lowered in ("id", "billno"))
        if id_field is None and labels:
            id_field = labels[0]
        return ColumnRoles(id_field=id_field, amount_field=amount_field)

    id_field = _first(labels, lambda lowered: "claim" in lowered or lowered == "id")
    return ColumnRoles(id_field=id_field or TARGET_ID_FALLBACK)


def _first(labels: Sequence[str], predicate) -> Optional[str]:
    for label in labels:
        if predicate(label.lower()):
            return label
    return None
