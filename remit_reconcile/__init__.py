"""Core package for matching submission claims against remittance reports."""

from .models import Cell, CellKind, Grid, ReconciliationResult, Record
from .pipeline import reconcile_grids

__all__ = [
    "Cell",
    "CellKind",
    "Grid",
    "ReconciliationResult",
    "Record",
    "reconcile_grids",
]
